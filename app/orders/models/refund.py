"""
Refund model recording money returned against an order.

A Refund is an immutable ledger entry. Creating one runs the admission
protocol: the order is locked, the requested amount is checked against
the order's remaining balance, the row is inserted and the order is
marked refunded, all in one transaction.

Usage:
    from orders.models import Refund

    refund = Refund.objects.create(order=order, amount_in_cents=2500)
    order.status  # "refunded"

    Refund.objects.create(order=order, amount_in_cents=10**9)
    # OverRefundError: [AMOUNT_INVALID] Amount in cents is invalid
"""

from __future__ import annotations

import logging

from django.db import models, transaction

from core.exceptions import NotFoundError
from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from orders.exceptions import (
    InvalidRefundAmountError,
    MissingOrderError,
    OverRefundError,
    RefundImmutableError,
)
from orders.locks import check_version, save_if_version

logger = logging.getLogger(__name__)


class Refund(UUIDPrimaryKeyMixin, BaseModel):
    """
    Represents money returned to a customer against one order.

    Append-only: rows are validated and written once, never updated
    or deleted.

    Fields:
        order: Order being refunded
        amount_in_cents: Refund amount in smallest currency unit

    Note:
        The sum of refunds for an order never exceeds its total. This is
        enforced at admission time under a row lock on the order.
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="refunds",
        help_text="Order being refunded",
    )

    # ==========================================================================
    # Amount
    # ==========================================================================

    amount_in_cents = models.PositiveBigIntegerField(
        help_text="Refund amount in smallest currency unit (e.g., cents)",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["created_at"]
        verbose_name = "Refund"
        verbose_name_plural = "Refunds"
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="refund_order_created_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount_in_cents__gt=0),
                name="refund_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation with ID and amount."""
        return f"Refund({self.id}, {self.amount_in_cents / 100:.2f})"

    def save(self, *args, **kwargs):
        """
        Admit and persist a new refund.

        Raises:
            RefundImmutableError: The refund already exists
            MissingOrderError: No valid order reference
            InvalidRefundAmountError: Amount missing, zero or negative
            ConcurrencyConflictError: The caller's order snapshot is stale
            OverRefundError: Amount exceeds the available balance
        """
        if not self._state.adding:
            raise RefundImmutableError(
                f"Refund {self.pk} cannot be modified",
                details={"refund_id": str(self.pk)},
            )

        snapshot = self._order_snapshot()
        if self.order_id is None or (snapshot is not None and snapshot._state.adding):
            raise MissingOrderError(details={"amount_in_cents": self.amount_in_cents})

        amount = self.amount_in_cents
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidRefundAmountError(
                "Refund amount must be a positive integer amount in cents",
                details={"amount_in_cents": amount},
            )

        order_model = self._meta.get_field("order").related_model
        expected_version = snapshot.version if snapshot is not None else None

        with transaction.atomic():
            try:
                order = check_version(order_model, self.order_id, expected_version)
            except NotFoundError as exc:
                raise MissingOrderError(
                    f"Order {self.order_id} does not exist",
                    details={"order_id": str(self.order_id)},
                ) from exc

            available = order.available_amount_for_refunding()
            if amount > available:
                raise OverRefundError(
                    order_id=order.pk,
                    amount_in_cents=amount,
                    available_amount_in_cents=available,
                )

            super().save(*args, **kwargs)

            order.mark_refunded()
            save_if_version(order, ["status", "refunded_at"])

        logger.info(
            "Refund recorded",
            extra={
                "refund_id": str(self.pk),
                "order_id": str(order.pk),
                "amount_in_cents": amount,
                "available_amount_in_cents": available - amount,
            },
        )

        if snapshot is not None:
            snapshot.mark_refunded()
            snapshot.version = order.version
            snapshot.refunded_at = order.refunded_at
            snapshot.updated_at = order.updated_at
        else:
            self.order = order

    def delete(self, *args, **kwargs):
        raise RefundImmutableError(
            f"Refund {self.pk} cannot be deleted",
            details={"refund_id": str(self.pk)},
        )

    def _order_snapshot(self):
        """Return the Order instance the caller attached, if any."""
        if self._meta.get_field("order").is_cached(self):
            return self.order
        return None
