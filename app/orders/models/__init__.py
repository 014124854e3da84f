"""
Order domain models.

Models:
    Order: Charged total, derived refund balance, status ratchet
    Refund: Immutable refund ledger entry against an order
"""

from orders.models.order import Order
from orders.models.refund import Refund

__all__ = [
    "Order",
    "Refund",
]
