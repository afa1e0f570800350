"""
Error taxonomy for the loan ledger.

Every error raised by the engine derives from LedgerError so callers
can catch the whole family in one place.
"""

from typing import Any, Optional


class LedgerError(Exception):
    """Base exception for all ledger errors."""
    pass


class ValidationError(LedgerError):
    """
    Input rejected before any mutation was applied.

    Carries the validation issues that caused the rejection.
    """

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message)
        self.issues = issues or []


class NotFoundError(LedgerError):
    """Operation referenced an unknown borrower or loan."""
    pass


class StorageError(LedgerError):
    """Base exception for persistence operations."""
    pass


class PersistenceCapacityError(StorageError):
    """
    The storage backend rejected a save because it is full.

    The in-memory mutation has already been applied when this is raised.
    ``result`` holds what the mutation would have returned so the caller
    can still show it, then prompt for a backup.
    """

    def __init__(self, message: str, result: Any = None):
        super().__init__(message)
        self.result = result


class ParseError(StorageError):
    """A snapshot could not be decoded or has the wrong shape."""
    pass
