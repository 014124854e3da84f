"""
Refund service for recording money returned to customers.

This module provides the RefundService class, the caller-facing entry
point to refund admission. The admission rules themselves live on the
Refund model; the service resolves the order, converts expected
rejections into ServiceResult failures, and retries admissions that
lost a race on the order row.

Usage:
    from orders.services import RefundService

    eligibility = RefundService.check_refund_eligibility(order, 4000)

    if eligibility.eligible:
        result = RefundService.request_refund(order.id, 4000)

        if result.success:
            print(f"Refund recorded: {result.data.id}")
        else:
            print(f"Refund rejected: {result.error} ({result.error_code})")

    # Refund everything that is left
    RefundService.request_refund(order.id)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError

from core.services import BaseService, ServiceResult

from orders.exceptions import (
    ConcurrencyConflictError,
    RefundValidationError,
)
from orders.models import Order, Refund

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Constants
# =============================================================================

# Admission attempts when the order changes under us
DEFAULT_MAX_ATTEMPTS = 3


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class RefundEligibility:
    """
    Result of refund eligibility check.

    Attributes:
        eligible: Whether the amount could be refunded right now
        available_amount_in_cents: Balance still refundable at check time
        block_reason: Human-readable reason if not eligible
    """

    eligible: bool
    available_amount_in_cents: int = 0
    block_reason: str | None = None


# =============================================================================
# Refund Service
# =============================================================================


class RefundService(BaseService):
    """
    Service for recording refunds against orders.

    Admission Flow:
        1. Resolve the order (missing id or unknown order -> ORDER_REQUIRED)
        2. Reject amounts that are not positive integers (INVALID_AMOUNT)
        3. Create the refund; the model locks the order, checks the balance,
           inserts the row and marks the order refunded in one transaction
        4. On ConcurrencyConflictError, re-read the order and try again

    Safety Guarantees:
        - Row lock serialises refunds on the same order
        - Version check rejects admissions computed from a stale order
        - Nothing is persisted for a rejected refund
    """

    # =========================================================================
    # Eligibility Checking
    # =========================================================================

    @classmethod
    def check_refund_eligibility(
        cls,
        order: Order,
        amount_in_cents: int | None = None,
    ) -> RefundEligibility:
        """
        Check whether an order can be refunded.

        Args:
            order: The Order to check
            amount_in_cents: Optional specific amount (None = everything left)

        Returns:
            RefundEligibility with the available balance and block reason

        Note:
            The answer is advisory. A concurrent refund may consume the
            balance before request_refund runs.
        """
        available = order.available_amount_for_refunding()

        cls.get_logger().debug(
            "Checking refund eligibility",
            extra={
                "order_id": str(order.id),
                "current_status": order.status,
                "requested_amount_in_cents": amount_in_cents,
                "available_amount_in_cents": available,
            },
        )

        if amount_in_cents is not None and (
            isinstance(amount_in_cents, bool)
            or not isinstance(amount_in_cents, int)
            or amount_in_cents <= 0
        ):
            return RefundEligibility(
                eligible=False,
                available_amount_in_cents=available,
                block_reason="Refund amount must be a positive integer amount in cents",
            )

        if available <= 0:
            return RefundEligibility(
                eligible=False,
                available_amount_in_cents=available,
                block_reason="Order has been fully refunded",
            )

        if not order.can_refund(amount_in_cents):
            return RefundEligibility(
                eligible=False,
                available_amount_in_cents=available,
                block_reason=(
                    f"Refund amount ({amount_in_cents}) exceeds "
                    f"available amount ({available})"
                ),
            )

        return RefundEligibility(eligible=True, available_amount_in_cents=available)

    # =========================================================================
    # Refund Admission
    # =========================================================================

    @classmethod
    def request_refund(
        cls,
        order_id: Any,
        amount_in_cents: int | None = None,
        max_attempts: int | None = None,
    ) -> ServiceResult[Refund]:
        """
        Record a refund against an order.

        Args:
            order_id: ID of the order to refund
            amount_in_cents: Amount to refund (None = everything left)
            max_attempts: Admission attempts on concurrency conflicts
                (defaults to settings.REFUND_MAX_ATTEMPTS)

        Returns:
            ServiceResult with the persisted Refund, or a failure with
            error code ORDER_REQUIRED, INVALID_AMOUNT or AMOUNT_INVALID

        Raises:
            ConcurrencyConflictError: The order kept changing under us for
                every attempt
        """
        if max_attempts is None:
            max_attempts = getattr(
                settings, "REFUND_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS
            )
        log_extra = {
            "order_id": str(order_id),
            "amount_in_cents": amount_in_cents,
        }

        if amount_in_cents is not None and (
            isinstance(amount_in_cents, bool)
            or not isinstance(amount_in_cents, int)
            or amount_in_cents <= 0
        ):
            cls.get_logger().warning("Rejected refund with invalid amount", extra=log_extra)
            return ServiceResult.failure(
                "Refund amount must be a positive integer amount in cents",
                error_code="INVALID_AMOUNT",
                details={"amount_in_cents": amount_in_cents},
            )

        attempt = 0
        while True:
            attempt += 1

            order = cls._get_order(order_id)
            if order is None:
                cls.get_logger().warning("Refund requested for unknown order", extra=log_extra)
                return ServiceResult.failure(
                    "Order is required",
                    error_code="ORDER_REQUIRED",
                    details={"order_id": str(order_id) if order_id is not None else None},
                )

            try:
                refund = order.refund(amount_in_cents)
            except RefundValidationError as e:
                return cls.handle_exception(
                    e,
                    "Refund rejected",
                    extra={**log_extra, **e.details},
                )
            except ConcurrencyConflictError:
                if attempt >= max_attempts:
                    cls.get_logger().error(
                        "Refund admission conflicted on every attempt",
                        extra={**log_extra, "attempt": attempt},
                    )
                    raise
                cls.get_logger().warning(
                    "Order changed during refund admission, retrying",
                    extra={**log_extra, "attempt": attempt},
                )
                continue

            return ServiceResult.success(refund)

    @staticmethod
    def _get_order(order_id: Any) -> Order | None:
        if order_id is None:
            return None
        try:
            return Order.objects.filter(pk=order_id).first()
        except DjangoValidationError:
            # Malformed UUID
            return None
