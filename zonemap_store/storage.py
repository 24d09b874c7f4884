"""
Durable Key-Value Storage
=========================

Bounded Context: Persistence backends for the zone collection.

Design:
- KeyValueStore protocol: string keys, string values
- JsonFileStore writes atomically (temp file + os.replace), so a failed
  write leaves the previous durable copy untouched
- MemoryStore for tests and throwaway sessions
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from zonemap_store.errors import StorageError


class KeyValueStore(Protocol):
    """Protocol for durable key-value stores (interface)."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...


_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStore:
    """
    One file per key under a directory.

    Example:
        store = JsonFileStore(Path("./data"))
        store.set("parking-zones", "[]")
        store.get("parking-zones")  # '[]'
    """

    def __init__(self, directory: Path):
        """
        Args:
            directory: Storage directory (created on first write)
        """
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=".tmp", dir=self.directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e


class MemoryStore:
    """Dict-backed store; contents live as long as the object."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
