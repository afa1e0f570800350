"""
Storage Services Package

Provides the abstract key-value interface, the snapshot codec with
legacy migration, and in-memory and JSON-file backends.
"""

from loanbook.services.storage.interface import LedgerStorageInterface
from loanbook.services.storage.memory import InMemoryStorage
from loanbook.services.storage.json_file import JsonFileStorage
from loanbook.services.storage.snapshot import (
    SCHEMA_VERSION,
    LedgerSnapshot,
    MigrationReport,
    decode_snapshot,
    encode_snapshot,
    migrate_state,
)

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Backends
    "InMemoryStorage",
    "JsonFileStorage",
    # Snapshot codec
    "SCHEMA_VERSION",
    "LedgerSnapshot",
    "MigrationReport",
    "decode_snapshot",
    "encode_snapshot",
    "migrate_state",
]
