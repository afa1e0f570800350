"""
JSON File Storage Implementation

The full snapshot lives in one UTF-8 JSON file. Saves write to a
temporary sibling and atomically replace the target, so a crash mid-write
leaves the previous snapshot intact.

Transient I/O errors are retried. A full disk or an exceeded quota is
not: it surfaces immediately as PersistenceCapacityError.
"""

import errno
import os
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from loanbook.config import StorageSettings, get_settings
from loanbook.exceptions import PersistenceCapacityError, StorageError
from loanbook.services.storage.interface import LedgerStorageInterface

CAPACITY_ERRNOS = {errno.ENOSPC, errno.EFBIG, getattr(errno, "EDQUOT", errno.ENOSPC)}


class TransientStorageError(StorageError):
    """An I/O failure worth retrying."""
    pass


class JsonFileStorage(LedgerStorageInterface):
    """
    File-backed implementation of ledger storage.

    Args:
        path: Snapshot file. Defaults to the configured ``data_path``.
        max_bytes: Byte quota. Defaults to the configured ``max_bytes``.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        max_bytes: Optional[int] = None,
        settings: Optional[StorageSettings] = None,
    ):
        settings = settings or get_settings().storage
        self._path = Path(path) if path is not None else settings.data_path
        self._max_bytes = max_bytes if max_bytes is not None else settings.max_bytes

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[str]:
        """Read the snapshot file; None if it does not exist yet."""
        if not self._path.exists():
            return None
        try:
            return self._read()
        except TransientStorageError as e:
            raise StorageError(f"Failed to read {self._path}: {e}") from e

    def save(self, payload: str) -> bool:
        """Atomically replace the snapshot file."""
        data = payload.encode("utf-8")
        if self._max_bytes is not None and len(data) > self._max_bytes:
            raise PersistenceCapacityError(
                f"Snapshot of {len(data)} bytes exceeds the {self._max_bytes} byte quota"
            )
        try:
            self._write(data)
        except TransientStorageError as e:
            raise StorageError(f"Failed to save {self._path}: {e}") from e
        return True

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(TransientStorageError),
        reraise=True,
    )
    def _read(self) -> str:
        try:
            return self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StorageError(f"{self._path} is not UTF-8 text: {e}") from e
        except OSError as e:
            raise TransientStorageError(str(e)) from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(TransientStorageError),
        reraise=True,
    )
    def _write(self, data: bytes) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path.exists():
                tmp_path.unlink()
            if e.errno in CAPACITY_ERRNOS:
                raise PersistenceCapacityError(f"Storage full while saving {self._path}: {e}") from e
            raise TransientStorageError(str(e)) from e
