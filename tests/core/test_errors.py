"""Tests for error types and codes."""

from collections.abc import Generator
from contextlib import contextmanager

import pytest
from sqlalchemy.exc import OperationalError

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


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_FILE_NOT_FOUND, 2000),
            (ErrorCode.ITEM_NOT_FOUND, 3000),
            (ErrorCode.INVARIANT_VIOLATION, 3000),
            (ErrorCode.STORAGE_BUSY, 4000),
            (ErrorCode.INTERNAL_ERROR, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestOrdinalError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = NotFoundError(
            code=ErrorCode.ITEM_NOT_FOUND,
            message="Test message",
            retryable=False,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 3001,
            "error": "ITEM_NOT_FOUND",
            "message": "Test message",
            "retryable": False,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_includes_code_and_name(self) -> None:
        error = InternalError.unexpected("boom")
        assert str(error) == "[9001] INTERNAL_ERROR: Internal error: boom"

    def test_fields_are_frozen(self) -> None:
        error = NotFoundError.item("x")
        with pytest.raises(AttributeError):
            error.message = "changed"  # type: ignore[misc]

    def test_given_subclass_when_raised_through_contextmanager_then_propagates(self) -> None:
        """contextlib can attach the traceback on the way out."""

        @contextmanager
        def scope() -> Generator[None, None, None]:
            yield

        with pytest.raises(NotFoundError) as exc_info, scope():
            raise NotFoundError.parent("p")

        assert exc_info.value.__traceback__ is not None
        assert isinstance(exc_info.value, OrdinalError)


class TestFactories:
    """Classmethod constructors fill code and details."""

    def test_not_found_item_and_parent(self) -> None:
        assert NotFoundError.item(7).details == {"item": "7"}
        parent = NotFoundError.parent("board")
        assert parent.code == ErrorCode.PARENT_NOT_FOUND
        assert parent.details == {"parent_id": "board"}

    def test_invalid_argument(self) -> None:
        error = InvalidArgumentError.create("new_index", -1, "index must be non-negative")
        assert error.code == ErrorCode.INVALID_ARGUMENT
        assert error.details == {
            "argument": "new_index",
            "value": "-1",
            "reason": "index must be non-negative",
        }
        assert not error.retryable

    def test_invariant_violation_is_retryable(self) -> None:
        error = InvariantViolationError.duplicates("p", [1, 3])
        assert error.retryable
        assert error.details == {"parent_id": "p", "indices": [1, 3]}

    def test_config_errors(self) -> None:
        assert ConfigError.parse_error("/x.yaml", "bad").code == ErrorCode.CONFIG_PARSE_ERROR
        assert ConfigError.invalid_value("a.b", 1, "no").details["field"] == "a.b"
        assert ConfigError.file_not_found("/x").code == ErrorCode.CONFIG_FILE_NOT_FOUND


class TestStorageError:
    """Driver errors are classified."""

    def test_locked_database_is_busy(self) -> None:
        exc = OperationalError("BEGIN IMMEDIATE", {}, Exception("database is locked"))
        error = StorageError.from_exception(exc, "reorder")
        assert error.code == ErrorCode.STORAGE_BUSY
        assert error.retryable
        assert error.details == {"operation": "reorder", "exception": "OperationalError"}

    def test_other_failures_are_storage_errors(self) -> None:
        error = StorageError.from_exception(RuntimeError("disk I/O error"), "create")
        assert error.code == ErrorCode.STORAGE_ERROR
        assert "disk I/O error" in error.message
