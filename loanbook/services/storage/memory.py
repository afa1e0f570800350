"""
In-memory storage backend.

Behaves like a browser key-value slot: one string value, an optional
byte quota, and a capacity error when a save would exceed it.
"""

from typing import Optional

from loanbook.exceptions import PersistenceCapacityError
from loanbook.services.storage.interface import LedgerStorageInterface


class InMemoryStorage(LedgerStorageInterface):
    """Holds the snapshot in a Python string."""

    def __init__(self, initial: Optional[str] = None, max_bytes: Optional[int] = None):
        self._payload = initial
        self._max_bytes = max_bytes
        self.save_count = 0

    def load(self) -> Optional[str]:
        return self._payload

    def save(self, payload: str) -> bool:
        size = len(payload.encode("utf-8"))
        if self._max_bytes is not None and size > self._max_bytes:
            raise PersistenceCapacityError(
                f"Snapshot of {size} bytes exceeds the {self._max_bytes} byte quota"
            )
        self._payload = payload
        self.save_count += 1
        return True
