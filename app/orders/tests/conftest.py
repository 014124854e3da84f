"""
Pytest fixtures for order tests.

Usage:
    def test_partial_refund(paid_order):
        paid_order.refund(4000)
        assert paid_order.status == OrderStatus.REFUNDED
"""

import pytest

from orders.tests.factories import OrderFactory, RefundFactory


# =============================================================================
# Order Fixtures
# =============================================================================


@pytest.fixture
def paid_order(db):
    """Create a $160.00 order with no refunds."""
    return OrderFactory(total_in_cents=16000)


@pytest.fixture
def partially_refunded_order(db):
    """Create a $160.00 order with $70.00 refunded over two refunds."""
    order = OrderFactory(total_in_cents=16000)
    order.refund(4000)
    order.refund(3000)
    return order


@pytest.fixture
def fully_refunded_order(db):
    """Create a $160.00 order refunded in full."""
    order = OrderFactory(total_in_cents=16000)
    order.refund()
    return order


# =============================================================================
# Refund Fixtures
# =============================================================================


@pytest.fixture
def refund(db, paid_order):
    """Create a $40.00 refund against paid_order."""
    return RefundFactory(order=paid_order, amount_in_cents=4000)
