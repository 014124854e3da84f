"""
Order-specific exceptions for refund ledger operations.

This module provides a hierarchy of exceptions for order and refund
operations, covering validation failures and concurrency control errors.

Exception Hierarchy:
    OrderValidationError - Invalid order data (inherits ValidationError)
    RefundValidationError - Base for rejected refunds (inherits ValidationError)
    ├── MissingOrderError - Refund without a valid order reference
    ├── OverRefundError - Amount exceeds the available balance
    └── InvalidRefundAmountError - Amount missing, zero or negative

    ConcurrencyConflictError - Order changed under us (inherits ConflictError)
    RefundImmutableError - Write against a persisted refund (inherits ConflictError)

Usage:
    from orders.exceptions import OverRefundError, ConcurrencyConflictError

    try:
        order.refund(17000)
    except OverRefundError as e:
        print(e.details["available_amount_in_cents"])

Note:
    Validation failures are scoped to the single refund attempt. The order
    and any prior refunds are left untouched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import ConflictError, ValidationError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Validation Exceptions
# =============================================================================


class OrderValidationError(ValidationError):
    """
    Raised when an order cannot be saved as given.

    Use for:
    - Missing or non-positive total
    - Attempts to change the total after creation
    """

    default_error_code: str = "ORDER_VALIDATION_ERROR"


class RefundValidationError(ValidationError):
    """
    Base exception for refund requests rejected during admission.

    Nothing is persisted when one of these is raised.
    """

    default_error_code: str = "REFUND_VALIDATION_ERROR"


class MissingOrderError(RefundValidationError):
    """
    Raised when a refund is attempted with no valid order reference.

    Checked before any balance arithmetic. Covers a missing reference,
    an unsaved order and an order id that does not exist.

    Example:
        Refund.objects.create(amount_in_cents=1000)
        # MissingOrderError: [ORDER_REQUIRED] Order is required
    """

    default_error_code: str = "ORDER_REQUIRED"

    def __init__(
        self,
        message: str = "Order is required",
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code=error_code, details=details)


class OverRefundError(RefundValidationError):
    """
    Raised when a refund amount exceeds the order's available balance.

    Attributes:
        amount_in_cents: The amount that was requested
        available_amount_in_cents: The balance seen at validation time

    Example:
        raise OverRefundError(
            order_id=order.pk,
            amount_in_cents=17000,
            available_amount_in_cents=16000,
        )
    """

    default_error_code: str = "AMOUNT_INVALID"

    def __init__(
        self,
        order_id: Any,
        amount_in_cents: int,
        available_amount_in_cents: int,
    ):
        super().__init__(
            "Amount in cents is invalid",
            details={
                "order_id": str(order_id),
                "amount_in_cents": amount_in_cents,
                "available_amount_in_cents": available_amount_in_cents,
            },
        )
        self.amount_in_cents = amount_in_cents
        self.available_amount_in_cents = available_amount_in_cents


class InvalidRefundAmountError(RefundValidationError):
    """
    Raised when a refund amount is missing, zero or negative.
    """

    default_error_code: str = "INVALID_AMOUNT"


# =============================================================================
# Concurrency Control Exceptions
# =============================================================================


class ConcurrencyConflictError(ConflictError):
    """
    Raised when a concurrent writer changed the order during admission.

    The caller may retry from scratch (re-reading the balance) a bounded
    number of times.

    Attributes:
        details: Contains order_id, expected_version and current_version
    """

    default_error_code: str = "CONCURRENCY_CONFLICT"


class RefundImmutableError(ConflictError):
    """
    Raised on any attempt to update or delete a persisted refund.
    """

    default_error_code: str = "REFUND_IMMUTABLE"


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Validation
    "OrderValidationError",
    "RefundValidationError",
    "MissingOrderError",
    "OverRefundError",
    "InvalidRefundAmountError",
    # Concurrency control
    "ConcurrencyConflictError",
    "RefundImmutableError",
]
