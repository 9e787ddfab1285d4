"""
Key-value blob stores backing the persisted store snapshot.

The store treats these as opaque: a string goes in under a key and the same
string comes back. Failures surface as StorageError.
"""

import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from ..core.exceptions import StorageError
from ..core.logging import get_logger


logger = get_logger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class BlobStore(ABC):
    """Opaque string storage addressed by key."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key was never written."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Replace the value stored under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""


class MemoryBlobStore(BlobStore):
    """In-process blob store, mostly for tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileBlobStore(BlobStore):
    """
    Blob store keeping one ``<key>.json`` file per key in a directory.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write never leaves a truncated blob behind.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        """File path used for ``key``."""
        safe_key = _UNSAFE_KEY_CHARS.sub("_", key) or "_"
        return self.directory / f"{safe_key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read blob {key!r}: {e}", key=key) from e

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.stem}-", suffix=".tmp", dir=self.directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write blob {key!r}: {e}", key=key) from e

        logger.debug(f"Wrote {len(value)} characters to {path}")

    def delete(self, key: str) -> None:
        try:
            self.path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete blob {key!r}: {e}", key=key) from e
