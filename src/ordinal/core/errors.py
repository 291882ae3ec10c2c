"""Ordinal error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Ordering (lookup, arguments, invariants)
- 4xxx: Storage
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Ordering (3xxx)
    ITEM_NOT_FOUND = 3001
    PARENT_NOT_FOUND = 3002
    INVALID_ARGUMENT = 3003
    INVARIANT_VIOLATION = 3004

    # Storage (4xxx)
    STORAGE_ERROR = 4001
    STORAGE_BUSY = 4002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True)
class OrdinalError(Exception):
    """Base error with structured context for callers. Raise a subclass."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'ITEM_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(OrdinalError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class NotFoundError(OrdinalError):
    """Target item or parent is absent (or soft-deleted)."""

    @classmethod
    def item(cls, key: str | int) -> "NotFoundError":
        return cls(
            code=ErrorCode.ITEM_NOT_FOUND,
            message=f"Item not found: {key}",
            details={"item": str(key)},
        )

    @classmethod
    def parent(cls, parent_id: str) -> "NotFoundError":
        return cls(
            code=ErrorCode.PARENT_NOT_FOUND,
            message=f"Parent not found: {parent_id}",
            details={"parent_id": parent_id},
        )


class InvalidArgumentError(OrdinalError):
    """Malformed input, such as a negative or out-of-range index."""

    @classmethod
    def create(cls, argument: str, value: Any, reason: str) -> "InvalidArgumentError":
        return cls(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"Invalid argument '{argument}': {reason}",
            details={"argument": argument, "value": str(value), "reason": reason},
        )


class InvariantViolationError(OrdinalError):
    """Duplicate indices survived automatic compaction.

    Always fatal to the triggering request; the whole transaction is rolled back.
    """

    @classmethod
    def duplicates(cls, parent_id: str, indices: list[int]) -> "InvariantViolationError":
        return cls(
            code=ErrorCode.INVARIANT_VIOLATION,
            message=(
                f"Invariant violation: duplicate indices remain after compaction "
                f"in parent {parent_id}"
            ),
            retryable=True,
            details={"parent_id": parent_id, "indices": indices},
        )


class StorageError(OrdinalError):
    """Transaction or connection failure from the underlying store."""

    @classmethod
    def from_exception(cls, exc: Exception, operation: str) -> "StorageError":
        reason = str(exc).lower()
        busy = "database is locked" in reason or "database is busy" in reason
        return cls(
            code=ErrorCode.STORAGE_BUSY if busy else ErrorCode.STORAGE_ERROR,
            message=f"Storage failure during {operation}: {exc}",
            retryable=True,
            details={"operation": operation, "exception": type(exc).__name__},
        )


class InternalError(OrdinalError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
