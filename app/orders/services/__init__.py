"""
Order services for coordinating refund ledger operations.

This module provides:
- OrderService: Creates orders and reads their refund balance
- RefundService: Records refunds with conflict retries
- LedgerAuditService: Detects orders that disagree with their refunds

Usage:
    from orders.services import OrderService, RefundService

    order = OrderService.create_order(16000).data

    result = RefundService.request_refund(order.id, 4000)
    if not result:
        print(result.error_code)
"""

from orders.services.ledger_audit_service import (
    InconsistencyType,
    LedgerAuditService,
    LedgerInconsistency,
)
from orders.services.order_service import OrderService, OrderSnapshot
from orders.services.refund_service import RefundEligibility, RefundService

__all__ = [
    # Orders
    "OrderService",
    "OrderSnapshot",
    # Refunds
    "RefundService",
    "RefundEligibility",
    # Audit
    "LedgerAuditService",
    "LedgerInconsistency",
    "InconsistencyType",
]
