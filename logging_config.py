"""
Structured logging configuration for the wage planner.

Routes the package's module loggers into separate files per concern, on top
of a console handler for warnings.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Set

# Logger names for different concerns; module loggers below them inherit handlers
ENGINE_LOGGER = "wage_planner.engines"
SESSION_LOGGER = "wage_planner.session"
PERFORMANCE_LOGGER = "wage_planner.performance"
DEBUG_LOGGER = "wage_planner"

# Standard log format with module name and line number
LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FILES = (
    "engine_events.log",
    "session_events.log",
    "performance_metrics.log",
    "warnings_errors.log",
    "debug_detail.log",
    "combined.log",
)

_LOGGING_CONFIGURED = False
_log_files_created: Set[Path] = set()


def clear_logs(log_dir: Path) -> None:
    """Delete the log files this module writes in ``log_dir``."""
    for name in LOG_FILES:
        log_file = log_dir / name
        if log_file.exists():
            try:
                log_file.unlink()
            except OSError as e:
                print(f"Warning: Could not delete {log_file}: {e}")


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
        mode="a",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    _log_files_created.add(path)
    return handler


def _attach(logger_name: str, handler: logging.Handler, level: int) -> None:
    logger = logging.getLogger(logger_name)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    logger.setLevel(level)
    logger.addHandler(handler)
    logger.propagate = True  # Allow to bubble up to root


def setup_logging(log_dir: Path, debug: bool = False, clear_existing: bool = True) -> None:
    """
    Configure structured logging for the application.

    Creates separate log files for different concerns:
    - engine_events.log: Matrix edits, recomputation and budget math (INFO+)
    - session_events.log: Staging, persistence and reload events (INFO+)
    - performance_metrics.log: Timing of recomputations (INFO+)
    - warnings_errors.log: Warnings and errors (WARNING+)
    - debug_detail.log: Every package message (DEBUG, only if debug=True)
    - combined.log: Combined log of all messages (INFO+)

    Args:
        log_dir: Directory where log files will be stored
        debug: If True, enables debug logging and creates debug_detail.log
        clear_existing: If True, clears existing log files before starting
    """
    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    if clear_existing:
        clear_logs(log_dir)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    file_formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)-8s %(message)s"))
    root_logger.addHandler(console)

    root_logger.addHandler(_file_handler(log_dir / "combined.log", logging.INFO, file_formatter))
    root_logger.addHandler(
        _file_handler(log_dir / "warnings_errors.log", logging.WARNING, file_formatter)
    )

    _attach(
        ENGINE_LOGGER,
        _file_handler(log_dir / "engine_events.log", logging.INFO, file_formatter),
        logging.DEBUG if debug else logging.INFO,
    )
    _attach(
        SESSION_LOGGER,
        _file_handler(log_dir / "session_events.log", logging.INFO, file_formatter),
        logging.DEBUG if debug else logging.INFO,
    )
    _attach(
        PERFORMANCE_LOGGER,
        _file_handler(log_dir / "performance_metrics.log", logging.INFO, file_formatter),
        logging.INFO,
    )

    if debug:
        _attach(
            DEBUG_LOGGER,
            _file_handler(log_dir / "debug_detail.log", logging.DEBUG, file_formatter),
            logging.DEBUG,
        )

    _LOGGING_CONFIGURED = True


def reset_logging() -> None:
    """Detach every handler installed by ``setup_logging`` so it can run again."""
    global _LOGGING_CONFIGURED
    for name in (None, ENGINE_LOGGER, SESSION_LOGGER, PERFORMANCE_LOGGER, DEBUG_LOGGER):
        logger = logging.getLogger(name)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()
    _log_files_created.clear()
    _LOGGING_CONFIGURED = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a properly configured logger instance.

    Args:
        name: Logger name (e.g., __name__). If None, returns root logger.
    """
    if not _LOGGING_CONFIGURED:
        setup_logging(Path("output_dev/planner_logs"), debug=False)
    return logging.getLogger(name)
