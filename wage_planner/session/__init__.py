from .controller import StagingController
from .exceptions import RosterLoadError, StorageError, WagePlannerError
from .registry import SessionRegistry
from .storage import InMemoryMatrixStore, JsonFileMatrixStore, MatrixStore

__all__ = [
    "InMemoryMatrixStore",
    "JsonFileMatrixStore",
    "MatrixStore",
    "RosterLoadError",
    "SessionRegistry",
    "StagingController",
    "StorageError",
    "WagePlannerError",
]
