"""Services package."""

from loanbook.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    LedgerStorageInterface,
)

__all__ = [
    "InMemoryStorage",
    "JsonFileStorage",
    "LedgerStorageInterface",
]
