"""
Custom exceptions for the LogJournal application.

This module defines application-specific exceptions that provide
clear error handling and debugging information.
"""

from typing import Optional, Dict, Any


class LogJournalError(Exception):
    """Base exception for all LogJournal application errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(LogJournalError):
    """Raised when there are configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None) -> None:
        super().__init__(message, "CONFIG_ERROR")
        self.config_key = config_key


class ValidationError(LogJournalError):
    """Raised when user input fails validation before any mutation."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        invalid_value: Optional[Any] = None
    ) -> None:
        super().__init__(message, "VALIDATION_ERROR")
        self.field_name = field_name
        self.invalid_value = invalid_value


class NotFoundError(LogJournalError):
    """Raised by workflows that cannot continue without a referenced record."""

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        entity_id: Optional[str] = None
    ) -> None:
        super().__init__(message, "NOT_FOUND")
        self.entity = entity
        self.entity_id = entity_id


class ExportFailedError(LogJournalError):
    """Raised when a document encoder or one of its assets fails."""

    def __init__(
        self,
        message: str,
        export_format: Optional[str] = None,
        encoder_error: Optional[str] = None
    ) -> None:
        super().__init__(message, "EXPORT_ERROR")
        self.export_format = export_format
        self.encoder_error = encoder_error


class StorageError(LogJournalError):
    """Raised when the persisted blob cannot be read or written."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message, "STORAGE_ERROR")
        self.key = key
