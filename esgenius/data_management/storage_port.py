"""Key-value storage port used by the JSON-blob stores.

Stores keep one serialized JSON document per key and never talk to the
filesystem directly, so they can run against MemoryStorage in tests and
FileStorage in the application.

Contract:
- read(key) returns the stored string, or None if the key was never set
- write(key, value) returns only after the value is durably committed
- delete(key) is a no-op for missing keys
- I/O failures surface as StoreReadError / StoreWriteError
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable

from loguru import logger

from esgenius.data_management.errors import StoreReadError, StoreWriteError


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


@runtime_checkable
class StoragePort(Protocol):
    """Minimal durable string key-value interface."""

    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage. Durable only for the lifetime of the object."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._values)


class FileStorage:
    """
    Directory-backed storage with one ``<key>.json`` file per key.

    Writes go to a temporary file in the same directory, are flushed and
    fsynced, then atomically replace the target; the directory is fsynced
    after the rename. A reader therefore sees either the previous value or
    the new one, never a partial write.

    Attributes:
        directory: Directory holding the key files (created on first write)
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        self.logger = logger.bind(component="FileStorage")

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def _fsync_directory(self) -> None:
        """Persist the directory entry created by os.replace (POSIX only)."""
        if os.name != "posix":
            return
        dir_fd = os.open(self.directory, os.O_RDONLY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StoreReadError(key, f"failed to read {path}: {e}") from e

    def write(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_name: Optional[str] = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{key}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
            self._fsync_directory()
        except OSError as e:
            raise StoreWriteError(key, f"failed to write {path}: {e}") from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        self.logger.debug(f"Persisted {key}", path=str(path), size=len(value))

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StoreWriteError(key, f"failed to delete {path}: {e}") from e
