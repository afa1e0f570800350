"""
Abstract Storage Interface

DESIGN DECISION: The ledger sees persistence as a single key-value slot
holding the full JSON snapshot. Every mutation overwrites the whole
snapshot; there is no incremental diffing.

This allows us to:
1. Use in-memory storage for testing
2. Swap the JSON file for another key-value backend later
3. Keep the ledger decoupled from storage mechanics
"""

from abc import ABC, abstractmethod
from typing import Optional


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger snapshot storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> Optional[str]:
        """
        Read the stored snapshot.

        Returns:
            The serialized snapshot, or None if nothing was saved yet
        """
        pass

    @abstractmethod
    def save(self, payload: str) -> bool:
        """
        Overwrite the stored snapshot.

        Args:
            payload: The full serialized snapshot

        Returns:
            True if saved successfully

        Raises:
            PersistenceCapacityError: If the backend is full
            StorageError: If the save fails for another reason
        """
        pass
