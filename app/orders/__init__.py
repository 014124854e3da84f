"""
Orders app for refund bookkeeping.

This app handles:
- Order creation with an immutable charged total
- Partial and full refunds that never exceed the total
- Order status transitions triggered by refunds
- Ledger consistency checks

Usage:
    from orders.services import OrderService, RefundService

    order = OrderService.create_order(16000).data
    result = RefundService.request_refund(order.id, 4000)
"""
