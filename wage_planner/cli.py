# wage_planner/cli.py
# Command-line interface entry point (argparse)
"""
Load a roster and planner config, stage a batch of rate edits, and report
the weighted average and budget usage before and after.

Rates file (YAML)::

    grade_rates:            # optional, fan-out to every cell
      S: {base_up: 3.0, merit: 2.0}
    edits:
      - {scope: company, grade: A, field: merit, value: 1.5}
      - {scope: cell_pay_zone, band: Eng, level: Lv.2, zone: 3, grade: S, field: base_up, value: 4.0}
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
import yaml
from cerberus import Validator

from logging_config import setup_logging
from wage_planner.config.loaders import ConfigLoadError, load_planner_config
from wage_planner.config.models import PlannerConfig
from wage_planner.data.readers import DataReadError, read_roster
from wage_planner.engines.synchronizer import EditScope
from wage_planner.engines.weighted_average import visualize
from wage_planner.matrix.models import RATE_FIELDS, RateValues
from wage_planner.reporting.summaries import write_summaries
from wage_planner.session.controller import StagingController
from wage_planner.session.exceptions import WagePlannerError
from wage_planner.session.storage import JsonFileMatrixStore

logger = logging.getLogger(__name__)

LOG_DIR = Path("output_dev/planner_logs")

_RATE_VALUES_SCHEMA = {
    "type": "dict",
    "schema": {name: {"type": "number", "required": False} for name in RATE_FIELDS},
}

RATES_SCHEMA: Dict[str, Any] = {
    "grade_rates": {
        "type": "dict",
        "required": False,
        "keysrules": {"type": "string"},
        "valuesrules": _RATE_VALUES_SCHEMA,
    },
    "edits": {
        "type": "list",
        "required": False,
        "schema": {
            "type": "dict",
            "schema": {
                "scope": {"type": "string", "required": True, "allowed": [s.value for s in EditScope]},
                "band": {"type": "string", "required": False, "nullable": True},
                "level": {"type": ["string", "integer"], "required": False, "nullable": True},
                "zone": {"type": "integer", "required": False, "nullable": True},
                "grade": {"type": "string", "required": True},
                "field": {"type": "string", "required": True},
                "value": {"type": "number", "required": True},
            },
        },
    },
}


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Stage raise-rate edits against a roster and report budget usage."
    )
    parser.add_argument("--config", type=str, default=None, help="Path to the YAML planner config.")
    parser.add_argument(
        "--roster", type=str, required=True, help="Path to the CSV or Parquet roster file."
    )
    parser.add_argument("--rates", type=str, default=None, help="YAML file of rate edits to stage.")
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Commit the staged edits and persist the matrix to the output directory.",
    )
    parser.add_argument(
        "--output-dir", type=str, default=None, help="Directory to save summary CSV files."
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-dir",
        type=str,
        default=str(LOG_DIR),
        help=f"Directory to store log files (default: {LOG_DIR})",
    )
    return parser.parse_args(argv)


def load_rate_edits(path: Path) -> Dict[str, Any]:
    """Load and validate a rates file; raises ValueError when it does not match the schema."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    v = Validator(RATES_SCHEMA)
    if not v.validate(data):
        raise ValueError(f"Rates file validation failed: {v.errors}")
    return data


def stage_rate_edits(controller: StagingController, rate_edits: Dict[str, Any]) -> int:
    """Stage every edit of a rates file; returns how many changed the matrix."""
    applied = 0
    grade_rates = rate_edits.get("grade_rates") or {}
    if grade_rates and controller.set_grade_rates(
        {grade: RateValues.from_dict(values) for grade, values in grade_rates.items()}
    ):
        applied += 1
    for edit in rate_edits.get("edits") or []:
        level = edit.get("level")
        changed = controller.edit(
            EditScope(edit["scope"]),
            edit["grade"],
            edit["field"],
            edit["value"],
            band=edit.get("band"),
            level=str(level) if level is not None else None,
            zone=edit.get("zone"),
        )
        applied += int(changed)
    logger.info(f"Staged {applied} rate edits")
    return applied


def print_report(controller: StagingController) -> None:
    committed = controller.weighted_average
    usage = controller.budget_usage
    print(f"Employees: {committed.summary.total_employees}  "
          f"Salary mass: {committed.summary.total_salary:,.0f}")
    print(f"Committed effective rate: {committed.summary.effective_rate:.3f}%  "
          f"Budget usage: {usage.usage_percentage:.1f}% ({usage.status})")
    pending = controller.pending_weighted_average
    if pending is not None:
        pending_usage = controller.pending_budget_usage
        print(f"Pending effective rate: {pending.summary.effective_rate:.3f}%  "
              f"Budget usage: {pending_usage.usage_percentage:.1f}% ({pending_usage.status})")
        print(visualize(pending))
    else:
        print(visualize(committed))


def run(args: argparse.Namespace) -> None:
    config = load_planner_config(Path(args.config)) if args.config else PlannerConfig()
    roster = read_roster(Path(args.roster))
    output_path = Path(args.output_dir) if args.output_dir else None

    store = JsonFileMatrixStore(output_path) if (args.apply and output_path) else None
    controller = StagingController(roster, config, store=store)

    if args.rates:
        logger.info(f"Loading rate edits from: {args.rates}")
        stage_rate_edits(controller, load_rate_edits(Path(args.rates)))
    if args.apply:
        controller.apply()

    print_report(controller)

    if output_path is not None:
        matrix = controller.pending_matrix or controller.matrix
        result = controller.pending_weighted_average or controller.weighted_average
        usage = controller.pending_budget_usage or controller.budget_usage
        breakdown = controller.budget_breakdown(pending=True)
        write_summaries(output_path, matrix, result, usage, breakdown)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the wage planner CLI."""
    err_logger = logging.getLogger("wage_planner.errors")
    args = parse_arguments(argv)

    try:
        setup_logging(log_dir=Path(args.log_dir), debug=args.debug)
    except OSError as e:
        print(f"Error initializing logging: {e}", file=sys.stderr)
        return 1

    logger.info(f"Starting wage planner run with arguments: {vars(args)}")
    logger.info(f"Pandas version: {pd.__version__}  NumPy version: {np.__version__}")

    try:
        run(args)
        return 0
    except (ConfigLoadError, DataReadError, FileNotFoundError) as e:
        err_logger.error(f"Could not load inputs: {e}", exc_info=True)
    except ValueError as e:
        err_logger.error(f"Invalid input: {e}", exc_info=True)
    except WagePlannerError as e:
        err_logger.error(f"Planner error: {e}", exc_info=True)
    return 1


if __name__ == "__main__":
    sys.exit(main())
