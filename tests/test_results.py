"""
Tests for operation results and the transaction wrapper.
"""
import pytest
from unittest.mock import Mock
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from pkgregistry.core.results import (
    ConflictError,
    NotFoundError,
    OperationResult,
    RegistryError,
    ServerError,
    failure,
    registry_operation,
    success,
)


# ============================================================================
# Result Tests
# ============================================================================

class TestOperationResult:
    """Test result construction."""

    def test_success(self):
        result = success({"pointer": "abc"})
        assert result.ok is True
        assert result.short is None
        assert result.content == {"pointer": "abc"}
        assert bool(result) is True

    def test_failure(self):
        result = failure("Not Found", "missing")
        assert result.ok is False
        assert result.short == "Not Found"
        assert result.content == "missing"
        assert bool(result) is False

    @pytest.mark.parametrize("error_class,short", [
        (NotFoundError, "Not Found"),
        (ConflictError, "Conflict"),
        (ServerError, "Server Error"),
        (RegistryError, "Server Error"),
    ])
    def test_error_to_result(self, error_class, short):
        result = error_class("detail text").to_result()
        assert isinstance(result, OperationResult)
        assert result.short == short
        assert result.content == "detail text"


# ============================================================================
# Transaction Wrapper Tests
# ============================================================================

class TestRegistryOperation:
    """Test commit and rollback behaviour of the wrapper."""

    def test_commits_on_success(self):
        """Test successful operation commits and wraps the payload."""
        db = Mock(spec=Session)

        @registry_operation
        def operation(session, value):
            return value * 2

        result = operation(db, 21)

        assert result.ok is True
        assert result.content == 42
        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_registry_error_rolls_back(self):
        """Test raised registry errors become failed results."""
        db = Mock(spec=Session)

        @registry_operation
        def operation(session):
            raise ConflictError("already there")

        result = operation(db)

        assert result.ok is False
        assert result.short == "Conflict"
        assert result.content == "already there"
        db.rollback.assert_called_once()
        db.commit.assert_not_called()

    def test_integrity_error_is_conflict(self):
        """Test constraint violations at commit time are conflicts."""
        db = Mock(spec=Session)
        db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

        @registry_operation
        def operation(session):
            return "ok"

        result = operation(db)

        assert result.short == "Conflict"
        db.rollback.assert_called_once()

    def test_storage_error_is_server_error(self):
        """Test other database errors are server errors."""
        db = Mock(spec=Session)

        @registry_operation
        def operation(session):
            raise OperationalError("SELECT 1", {}, Exception("connection lost"))

        result = operation(db)

        assert result.short == "Server Error"
        db.rollback.assert_called_once()

    def test_unexpected_errors_propagate(self):
        """Test programming errors are not swallowed."""
        db = Mock(spec=Session)

        @registry_operation
        def operation(session):
            raise KeyError("bug")

        with pytest.raises(KeyError):
            operation(db)

    def test_preserves_function_metadata(self):
        @registry_operation
        def documented(session):
            """Docstring survives."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring survives."
