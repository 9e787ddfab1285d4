"""Entry editing workflow and draft auto-save."""

from .autosave import DraftAutoSaver
from .service import LogEditor

__all__ = [
    "DraftAutoSaver",
    "LogEditor"
]
