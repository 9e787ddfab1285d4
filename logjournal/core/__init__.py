"""Core application modules and shared utilities."""

from .exceptions import LogJournalError
from .logging import setup_logging, get_logger

__all__ = [
    "LogJournalError",
    "setup_logging",
    "get_logger"
]
