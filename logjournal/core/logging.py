"""
Logging configuration and utilities for the LogJournal application.

This module provides centralized logging setup using Loguru with
structured logging and configurable output formats.
"""

import sys
from typing import Optional, Dict, Any

from loguru import logger

from ..settings import LoggingSettings


# Store configured loggers to avoid reconfiguration
_configured_loggers: Dict[str, bool] = {}


def setup_logging(
    log_settings: LoggingSettings,
    logger_name: str = "logjournal"
) -> None:
    """
    Set up application logging with Loguru.

    Args:
        log_settings: Logging configuration settings
        logger_name: Name of the logger instance
    """
    if logger_name in _configured_loggers:
        return  # Already configured

    # Remove default handler
    logger.remove()

    # Console handler goes to stderr so CLI output on stdout stays clean
    logger.add(
        sys.stderr,
        level=log_settings.level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[module]}</cyan> | "
            "<level>{message}</level>"
        ),
        filter=lambda record: "module" in record["extra"],
        colorize=True,
        backtrace=True,
        diagnose=False
    )

    if log_settings.file:
        log_settings.file.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_settings.file,
            level=log_settings.level,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss} | "
                "{level: <8} | "
                "{name}:{function}:{line} | "
                "{message}"
            ),
            rotation="10 MB",
            retention="1 month",
            compression="gz",
            backtrace=True,
            diagnose=False
        )

    _configured_loggers[logger_name] = True
    get_logger(__name__).info(
        f"Logging configured for {logger_name} at level {log_settings.level}"
    )


def get_logger(module_name: str) -> Any:
    """
    Get a logger instance for a specific module.

    Args:
        module_name: Name of the module requesting the logger

    Returns:
        Configured logger instance
    """
    return logger.bind(module=module_name)


def log_error_with_context(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    module: Optional[str] = None
) -> None:
    """Log errors with additional context information."""
    error_data = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }

    get_logger(module or "unknown").bind(**error_data).error(
        f"Error in {module or 'unknown module'}: {error}"
    )
