"""
Order model owning the charged total and the derived refund state.

An Order records a completed charge of a fixed total. Its refundable
balance is never stored: it is derived from the refund rows on every
call, so it cannot drift from the ledger.

Usage:
    from orders.models import Order

    order = Order.objects.create(total_in_cents=16000)
    order.status                            # "paid"
    order.available_amount_for_refunding()  # 16000

    order.refund(4000)
    order.can_refund(14000)                 # False, only 12000 left
    order.refund()                          # refund everything remaining
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from django_fsm import FSMField, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from orders.exceptions import OrderValidationError, OverRefundError
from orders.locks import save_if_version
from orders.state_machines import OrderStatus

if TYPE_CHECKING:
    from orders.models.refund import Refund


class Order(UUIDPrimaryKeyMixin, BaseModel):
    """
    A completed charge of a fixed total, refundable in one or more parts.

    Uses django-fsm for the status ratchet and a version field for
    optimistic concurrency control during refund admission.

    State Flow:
        PAID -> REFUNDED (on the first successful refund, partial or full)

    Fields:
        total_in_cents: Charged amount, immutable after creation
        status: Current FSM status
        version: Optimistic locking version
        refunded_at: When the first refund was recorded

    Note:
        The version field is auto-incremented on save. Refund admission
        locks the row and checks the version before writing.
    """

    # ==========================================================================
    # Amount
    # ==========================================================================

    total_in_cents = models.PositiveBigIntegerField(
        help_text="Charged amount in smallest currency unit (e.g., cents)",
    )

    # ==========================================================================
    # Status
    # ==========================================================================

    status = FSMField(
        default=OrderStatus.PAID,
        choices=OrderStatus.choices,
        db_index=True,
        protected=True,  # Prevent direct assignment outside transitions
        help_text="Current status of the order (managed by FSM)",
    )

    # ==========================================================================
    # Concurrency Control
    # ==========================================================================

    version = models.PositiveIntegerField(
        default=1,
        help_text="Version for optimistic locking - incremented on each save",
    )

    # ==========================================================================
    # Timestamps
    # ==========================================================================

    refunded_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the first refund was recorded (full or partial)",
    )

    # Written by save_if_version itself on every update
    VERSION_MANAGED_FIELDS = frozenset({"version", "updated_at", "created_at"})

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_in_cents__gt=0),
                name="order_total_positive",
            ),
        ]

    def __str__(self) -> str:
        """Return string representation with ID, status, and total."""
        return f"Order({self.id}, {self.status}, {self.total_in_cents / 100:.2f})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        # Deferred loads leave this as None and skip the immutability check
        instance._loaded_total_in_cents = instance.__dict__.get("total_in_cents")
        return instance

    def save(self, *args, **kwargs):
        """
        Save with creation defaults, total immutability and version check.

        On create, the order starts PAID and the total must be a positive
        integer. On update, the total must be unchanged and the row is
        written only if its version still matches this instance; the
        version is then incremented.

        Raises:
            OrderValidationError: Invalid total, changed total, or a new
                order created in a status other than PAID
            ConcurrencyConflictError: The order was modified since this
                instance was read
        """
        is_update = not self._state.adding and not kwargs.get("force_insert", False)

        if is_update:
            self._check_total_unchanged()
            update_fields = kwargs.get("update_fields")
            if update_fields is None:
                update_fields = [
                    field.attname
                    for field in self._meta.concrete_fields
                    if not field.primary_key
                    and field.attname not in self.VERSION_MANAGED_FIELDS
                ]
            save_if_version(
                self,
                [name for name in update_fields if name not in self.VERSION_MANAGED_FIELDS],
            )
        else:
            self._check_initial_status()
            self._check_total_valid()
            super().save(*args, **kwargs)

        self._loaded_total_in_cents = self.total_in_cents

    def _check_initial_status(self) -> None:
        if not self.status:
            # Transitions write through set_state; plain assignment is protected
            self._meta.get_field("status").set_state(self, OrderStatus.PAID)
        elif self.status != OrderStatus.PAID:
            raise OrderValidationError(
                "New orders start as paid",
                details={"status": self.status},
            )

    def _check_total_valid(self) -> None:
        total = self.total_in_cents
        if isinstance(total, bool) or not isinstance(total, int) or total <= 0:
            raise OrderValidationError(
                "Order total must be a positive integer amount in cents",
                details={"total_in_cents": total},
            )

    def _check_total_unchanged(self) -> None:
        loaded = getattr(self, "_loaded_total_in_cents", None)
        if loaded is not None and self.total_in_cents != loaded:
            raise OrderValidationError(
                "Order total cannot be changed after creation",
                details={
                    "order_id": str(self.pk),
                    "total_in_cents": loaded,
                    "attempted_total_in_cents": self.total_in_cents,
                },
            )

    # ==========================================================================
    # Balance
    # ==========================================================================

    def refunded_amount_in_cents(self) -> int:
        """Sum of all refund amounts recorded against this order."""
        if self._state.adding:
            return 0
        return self.refunds.aggregate(
            total=Coalesce(Sum("amount_in_cents"), 0),
        )["total"]

    def available_amount_for_refunding(self) -> int:
        """
        Amount that can still be refunded.

        Read fresh from the refund rows on every call. Only negative if the
        ledger invariant has been broken outside this model.
        """
        return self.total_in_cents - self.refunded_amount_in_cents()

    def can_refund(self, amount: int | None = None) -> bool:
        """
        Check whether a refund could be admitted right now.

        Args:
            amount: Amount in cents, or None for "everything remaining"

        Returns:
            True if the amount fits in the available balance. With no
            amount, True only while something is left to refund. An
            explicit zero is refused once nothing is left.

        Note:
            This is a balance check only. refund() never admits zero or
            negative amounts, so can_refund(0) being True does not mean
            refund(0) will succeed.
        """
        available = self.available_amount_for_refunding()
        if amount is None:
            return available > 0
        if amount == 0 and available == 0:
            return False
        return available >= amount

    def refund(self, amount: int | None = None) -> Refund:
        """
        Record a refund against this order.

        Args:
            amount: Amount in cents, or None to refund everything remaining

        Returns:
            The persisted Refund

        Raises:
            OverRefundError: Amount exceeds the available balance, or no
                amount was given and nothing is left
            InvalidRefundAmountError: Amount is zero or negative
            ConcurrencyConflictError: The order changed since it was read

        Note:
            Admission checks this instance's version against the stored
            row. An instance read before another refund or save is stale
            and is rejected even when the amount would still fit; reload
            it with Order.objects.get() and call refund() again, or use
            RefundService.request_refund(), which retries with a fresh read.
        """
        if amount is None:
            amount = self.available_amount_for_refunding()
            if amount <= 0:
                raise OverRefundError(
                    order_id=self.pk,
                    amount_in_cents=0,
                    available_amount_in_cents=amount,
                )
        return self.refunds.create(amount_in_cents=amount)

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=[OrderStatus.PAID, OrderStatus.REFUNDED],
        target=OrderStatus.REFUNDED,
    )
    def mark_refunded(self):
        """
        Mark the order as refunded.

        Transition: PAID -> REFUNDED, REFUNDED -> REFUNDED

        Called after every successful refund insert.
        """
        if self.refunded_at is None:
            self.refunded_at = timezone.now()

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_paid(self) -> bool:
        """Check if no refund has been recorded yet."""
        return self.status == OrderStatus.PAID

    @property
    def is_refunded(self) -> bool:
        """Check if at least one refund has been recorded."""
        return self.status == OrderStatus.REFUNDED
