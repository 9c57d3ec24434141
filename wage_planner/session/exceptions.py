"""
Custom exception classes for the planning session.

Edits against stale targets are not errors (they are logged no-ops); these
cover the failures a caller has to act on.
"""


class WagePlannerError(Exception):
    """Base exception for all session errors."""

    pass


class RosterLoadError(WagePlannerError):
    """Raised when a roster reload fails; the committed matrix is kept."""

    pass


class StorageError(WagePlannerError):
    """Raised when a matrix snapshot cannot be saved or loaded."""

    pass
