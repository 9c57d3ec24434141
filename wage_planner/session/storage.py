"""
Durable storage for committed matrix snapshots, keyed by an
application-defined string.
"""

import json
import logging
import re
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from wage_planner.matrix.models import AdjustmentMatrix

from .exceptions import StorageError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class MatrixStore(Protocol):
    def save(self, key: str, matrix: AdjustmentMatrix) -> None: ...

    def load(self, key: str) -> Optional[AdjustmentMatrix]: ...


class InMemoryMatrixStore:
    """Keeps serialized snapshots in a dict; nothing is shared with the caller."""

    def __init__(self):
        self._snapshots: Dict[str, str] = {}

    def save(self, key: str, matrix: AdjustmentMatrix) -> None:
        self._snapshots[key] = json.dumps(matrix.to_dict())

    def load(self, key: str) -> Optional[AdjustmentMatrix]:
        payload = self._snapshots.get(key)
        if payload is None:
            return None
        return AdjustmentMatrix.from_dict(json.loads(payload))

    def __contains__(self, key: str) -> bool:
        return key in self._snapshots


class JsonFileMatrixStore:
    """One JSON file per key under ``directory``."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def save(self, key: str, matrix: AdjustmentMatrix) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(matrix.to_dict(), f, ensure_ascii=False, indent=2)
            tmp_path.replace(path)
        except OSError as e:
            logger.exception(f"Failed to save matrix snapshot to {path}: {e}")
            raise StorageError(f"Could not save matrix snapshot '{key}'") from e
        logger.info(f"Saved matrix snapshot '{key}' (version {matrix.metadata.version}) to {path}")

    def load(self, key: str) -> Optional[AdjustmentMatrix]:
        path = self._path(key)
        if not path.is_file():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return AdjustmentMatrix.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.exception(f"Failed to load matrix snapshot from {path}: {e}")
            raise StorageError(f"Could not load matrix snapshot '{key}'") from e
