"""
Tests for LedgerAuditService.

Inconsistent rows are written with queryset updates and bulk_create,
which bypass refund admission.
"""

from orders.models import Order, Refund
from orders.services import InconsistencyType, LedgerAuditService
from orders.state_machines import OrderStatus


class TestFindOverRefundedOrders:
    """Tests for LedgerAuditService.find_over_refunded_orders."""

    def test_consistent_ledger_reports_nothing(
        self, db, paid_order, partially_refunded_order, fully_refunded_order
    ):
        """Should find nothing when every order went through admission."""
        assert LedgerAuditService.find_over_refunded_orders() == []

    def test_detects_over_refunded_order(self, db, paid_order):
        """Should report an order whose refunds exceed its total."""
        paid_order.refund(10000)
        Refund.objects.bulk_create([Refund(order=paid_order, amount_in_cents=10000)])

        [item] = LedgerAuditService.find_over_refunded_orders()

        assert item.order_id == paid_order.pk
        assert item.inconsistency_type == InconsistencyType.OVER_REFUNDED
        assert item.total_in_cents == 16000
        assert item.refunded_amount_in_cents == 20000
        assert item.refund_count == 2

    def test_detects_refunds_on_paid_order(self, db, paid_order):
        """Should report a paid order that has refunds."""
        paid_order.refund(1000)
        Order.objects.filter(pk=paid_order.pk).update(status=OrderStatus.PAID)

        [item] = LedgerAuditService.find_over_refunded_orders()

        assert item.inconsistency_type == InconsistencyType.REFUNDS_ON_PAID_ORDER
        assert item.status == OrderStatus.PAID

    def test_detects_refunded_order_without_refunds(self, db, paid_order):
        """Should report a refunded order with no refunds."""
        Order.objects.filter(pk=paid_order.pk).update(status=OrderStatus.REFUNDED)

        [item] = LedgerAuditService.find_over_refunded_orders()

        assert item.inconsistency_type == InconsistencyType.REFUNDED_WITHOUT_REFUNDS
        assert item.refunded_amount_in_cents == 0
        assert item.refund_count == 0

    def test_reports_every_problem_on_one_order(self, db, paid_order):
        """Should report both problems of an over-refunded paid order."""
        Refund.objects.bulk_create([Refund(order=paid_order, amount_in_cents=20000)])

        types = {
            item.inconsistency_type
            for item in LedgerAuditService.find_over_refunded_orders()
        }

        assert types == {
            InconsistencyType.OVER_REFUNDED,
            InconsistencyType.REFUNDS_ON_PAID_ORDER,
        }

    def test_ignores_healthy_orders(self, db, paid_order, partially_refunded_order):
        """Should only report the broken order."""
        Order.objects.filter(pk=paid_order.pk).update(status=OrderStatus.REFUNDED)

        items = LedgerAuditService.find_over_refunded_orders()

        assert [item.order_id for item in items] == [paid_order.pk]
