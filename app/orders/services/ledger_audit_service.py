"""
Ledger audit service for detecting refund ledger inconsistencies.

Refund admission keeps every order consistent with its refunds. This
service re-checks that across the whole table, for operators and for
tests that want to assert the ledger is sound after concurrent work.

Detection Categories:
    1. Over-refunded: refund total exceeds the order total
    2. Refunds on a paid order: refunds exist but status is still paid
    3. Refunded without refunds: status is refunded but no refund exists

Usage:
    from orders.services import LedgerAuditService

    inconsistencies = LedgerAuditService.find_over_refunded_orders()
    for item in inconsistencies:
        print(item.order_id, item.inconsistency_type, item.refunded_amount_in_cents)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum

from django.db.models import Count, F, Q, Sum
from django.db.models.functions import Coalesce

from core.services import BaseService

from orders.models import Order
from orders.state_machines import OrderStatus


# =============================================================================
# Data Types
# =============================================================================


class InconsistencyType(str, Enum):
    """Ways an order can disagree with its refund ledger."""

    OVER_REFUNDED = "over_refunded"
    REFUNDS_ON_PAID_ORDER = "refunds_on_paid_order"
    REFUNDED_WITHOUT_REFUNDS = "refunded_without_refunds"


@dataclass(frozen=True)
class LedgerInconsistency:
    """An order whose stored state disagrees with its refunds."""

    order_id: uuid.UUID
    inconsistency_type: InconsistencyType
    status: str
    total_in_cents: int
    refunded_amount_in_cents: int
    refund_count: int


# =============================================================================
# Ledger Audit Service
# =============================================================================


class LedgerAuditService(BaseService):
    """Read-only checks over the orders and refunds tables."""

    @classmethod
    def find_over_refunded_orders(cls) -> list[LedgerInconsistency]:
        """
        Find orders whose status or total disagrees with their refunds.

        Returns:
            One LedgerInconsistency per problem found, ordered by order
            creation. Empty when the ledger is consistent.
        """
        orders = (
            Order.objects.annotate(
                refunded=Coalesce(Sum("refunds__amount_in_cents"), 0),
                refund_count=Count("refunds"),
            )
            .filter(
                Q(refunded__gt=F("total_in_cents"))
                | Q(status=OrderStatus.PAID, refund_count__gt=0)
                | Q(status=OrderStatus.REFUNDED, refund_count=0)
            )
            .order_by("created_at")
        )

        inconsistencies = []
        for order in orders:
            for inconsistency_type in cls._classify(order):
                inconsistencies.append(
                    LedgerInconsistency(
                        order_id=order.id,
                        inconsistency_type=inconsistency_type,
                        status=order.status,
                        total_in_cents=order.total_in_cents,
                        refunded_amount_in_cents=order.refunded,
                        refund_count=order.refund_count,
                    )
                )

        for item in inconsistencies:
            cls.get_logger().error(
                "Refund ledger inconsistency",
                extra={
                    "order_id": str(item.order_id),
                    "inconsistency_type": item.inconsistency_type.value,
                    "total_in_cents": item.total_in_cents,
                    "refunded_amount_in_cents": item.refunded_amount_in_cents,
                },
            )

        return inconsistencies

    @staticmethod
    def _classify(order: Order) -> list[InconsistencyType]:
        found = []
        if order.refunded > order.total_in_cents:
            found.append(InconsistencyType.OVER_REFUNDED)
        if order.status == OrderStatus.PAID and order.refund_count > 0:
            found.append(InconsistencyType.REFUNDS_ON_PAID_ORDER)
        if order.status == OrderStatus.REFUNDED and order.refund_count == 0:
            found.append(InconsistencyType.REFUNDED_WITHOUT_REFUNDS)
        return found
