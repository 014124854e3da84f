"""
Tests for the application exception hierarchy.
"""

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


class TestBaseApplicationError:
    """Tests for BaseApplicationError."""

    def test_defaults(self):
        """Should use the class default code and empty details."""
        exc = BaseApplicationError("Something failed")

        assert exc.message == "Something failed"
        assert exc.error_code == "APPLICATION_ERROR"
        assert exc.details == {}
        assert str(exc) == "[APPLICATION_ERROR] Something failed"

    def test_to_dict(self):
        """Should include details only when present."""
        exc = NotFoundError(
            "Order 1 not found",
            error_code="ORDER_NOT_FOUND",
            details={"pk": "1"},
        )

        assert exc.to_dict() == {
            "error": "Order 1 not found",
            "error_code": "ORDER_NOT_FOUND",
            "details": {"pk": "1"},
        }
        assert ConflictError("busy").to_dict() == {
            "error": "busy",
            "error_code": "CONFLICT",
        }

    def test_subclass_default_codes(self):
        """Should give each subclass its own default code."""
        assert ValidationError("x").error_code == "VALIDATION_ERROR"
        assert NotFoundError("x").error_code == "NOT_FOUND"
        assert ConflictError("x").error_code == "CONFLICT"

    def test_repr(self):
        """Should show all fields."""
        exc = ValidationError("Bad", details={"a": 1})

        assert repr(exc) == (
            "ValidationError(message='Bad', error_code='VALIDATION_ERROR', "
            "details={'a': 1})"
        )
