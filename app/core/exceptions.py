"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error payloads across the application
- Machine-readable error codes for caller handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Input or business rule validation failures
    ├── NotFoundError - Resource not found
    └── ConflictError - State conflicts (concurrent modifications, immutability)

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("Total must be positive")

    # Raise with error code for caller handling
    raise ValidationError("Total must be positive", error_code="INVALID_TOTAL")

    # Raise with additional details
    raise ValidationError(
        "Refund amount exceeds available balance",
        error_code="AMOUNT_INVALID",
        details={"amount_in_cents": 17000, "available_amount_in_cents": 16000},
    )

    # Convert to dict for a service result or log record
    try:
        ...
    except BaseApplicationError as e:
        payload = e.to_dict()

Note:
    These exceptions are for domain/business logic errors. Database and
    connection failures are left as Django's own exceptions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Provides a consistent interface for error handling across the application.
    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for caller-side handling
        details: Additional error context (amounts, identifiers, etc.)

    Example:
        try:
            order.refund(17000)
        except BaseApplicationError as e:
            logger.warning(f"Refund rejected: {e.error_code}")
            return ServiceResult.failure(e.message, error_code=e.error_code)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to a dictionary.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "Order is required",
                "error_code": "ORDER_REQUIRED",
                "details": {"amount_in_cents": 1000}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for:
    - Invalid field values (non-positive totals, amounts)
    - Business rule violations (over-refunds)
    - Missing required references

    Example:
        raise ValidationError(
            "Validation failed",
            error_code="VALIDATION_ERROR",
            details={"total_in_cents": ["Must be positive"]},
        )

    Note:
        Model field validation through full_clean() raises Django's own
        ValidationError. Use this one for service and domain logic.
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Example:
        order = Order.objects.filter(id=order_id).first()
        if not order:
            raise NotFoundError(
                f"Order {order_id} not found",
                error_code="ORDER_NOT_FOUND",
                details={"order_id": str(order_id)},
            )
    """

    default_error_code: str = "NOT_FOUND"


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Use for:
    - Concurrent modification conflicts
    - Optimistic locking failures
    - Writes against immutable records

    Example:
        if rows_updated == 0:
            raise ConflictError(
                f"Order {order.pk} was modified by another process",
                error_code="CONCURRENCY_CONFLICT",
                details={"order_id": str(order.pk)},
            )
    """

    default_error_code: str = "CONFLICT"
