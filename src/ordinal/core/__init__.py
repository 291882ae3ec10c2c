"""Core module exports."""

from ordinal.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
    InvariantViolationError,
    NotFoundError,
    OrdinalError,
    StorageError,
)
from ordinal.core.logging import configure_logging, get_logger

__all__ = [
    # Errors
    "OrdinalError",
    "ErrorCode",
    "ConfigError",
    "NotFoundError",
    "InvalidArgumentError",
    "InvariantViolationError",
    "StorageError",
    "InternalError",
    # Logging
    "configure_logging",
    "get_logger",
]
