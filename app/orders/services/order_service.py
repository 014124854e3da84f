"""
Order service for creating orders and reading their refund state.

Usage:
    from orders.services import OrderService

    result = OrderService.create_order(16000)
    order = result.data

    snapshot = OrderService.get_order(order.id).data
    snapshot.available_amount_for_refunding  # 16000
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError as DjangoValidationError

from core.services import BaseService, ServiceResult

from orders.exceptions import OrderValidationError
from orders.models import Order, Refund

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class OrderSnapshot:
    """
    Point-in-time view of an order and its refund balance.

    Attributes:
        order: The Order instance the values were read from
        status: Order status at read time
        total_in_cents: Charged total
        refunded_amount_in_cents: Sum of recorded refunds
        available_amount_for_refunding: What is still refundable
    """

    order: Order
    status: str
    total_in_cents: int
    refunded_amount_in_cents: int
    available_amount_for_refunding: int


# =============================================================================
# Order Service
# =============================================================================


class OrderService(BaseService):
    """
    Service for order creation and lookup.

    Orders carry no mutable money state: the balance is always derived
    from the refund ledger, so this service only creates and reads.
    """

    @classmethod
    def create_order(cls, total_in_cents: Any) -> ServiceResult[Order]:
        """
        Create a paid order with the given total.

        Args:
            total_in_cents: Positive integer amount charged

        Returns:
            ServiceResult with the new Order, or failure INVALID_TOTAL
        """
        if (
            isinstance(total_in_cents, bool)
            or not isinstance(total_in_cents, int)
            or total_in_cents <= 0
        ):
            cls.get_logger().warning(
                "Rejected order with invalid total",
                extra={"total_in_cents": total_in_cents},
            )
            return ServiceResult.failure(
                "Order total must be a positive integer amount in cents",
                error_code="INVALID_TOTAL",
                details={"total_in_cents": total_in_cents},
            )

        try:
            with cls.atomic():
                order = Order.objects.create(total_in_cents=total_in_cents)
        except OrderValidationError as e:
            return cls.handle_exception(e, "Order creation failed")

        cls.get_logger().info(
            "Order created",
            extra={"order_id": str(order.id), "total_in_cents": total_in_cents},
        )
        return ServiceResult.success(order)

    @classmethod
    def get_order(cls, order_id: Any) -> ServiceResult[OrderSnapshot]:
        """Read an order together with its current refund balance."""
        order = cls._find_order(order_id)
        if order is None:
            return ServiceResult.failure(
                f"Order {order_id} not found",
                error_code="ORDER_NOT_FOUND",
                details={"order_id": str(order_id)},
            )

        refunded = order.refunded_amount_in_cents()
        return ServiceResult.success(
            OrderSnapshot(
                order=order,
                status=order.status,
                total_in_cents=order.total_in_cents,
                refunded_amount_in_cents=refunded,
                available_amount_for_refunding=order.total_in_cents - refunded,
            )
        )

    @classmethod
    def list_refunds(cls, order_id: Any) -> ServiceResult[list[Refund]]:
        """List the refunds recorded against an order, oldest first."""
        if cls._find_order(order_id) is None:
            return ServiceResult.failure(
                f"Order {order_id} not found",
                error_code="ORDER_NOT_FOUND",
                details={"order_id": str(order_id)},
            )

        refunds = list(Refund.objects.filter(order_id=order_id).order_by("created_at"))
        return ServiceResult.success(refunds)

    @staticmethod
    def _find_order(order_id: Any) -> Order | None:
        if order_id is None:
            return None
        try:
            return Order.objects.filter(pk=order_id).first()
        except DjangoValidationError:
            # Malformed UUID
            return None
