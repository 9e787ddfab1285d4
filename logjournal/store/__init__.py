"""Journal entity store and its persistence boundary."""

from .blob import BlobStore, FileBlobStore, MemoryBlobStore
from .service import LogStore
from .schemas import (
    DRAFT, DraftTarget, EditTarget, ExportFormat, LogEntry, PersistedTarget
)

__all__ = [
    "BlobStore",
    "FileBlobStore",
    "MemoryBlobStore",
    "LogStore",
    "DRAFT",
    "DraftTarget",
    "EditTarget",
    "ExportFormat",
    "LogEntry",
    "PersistedTarget"
]
