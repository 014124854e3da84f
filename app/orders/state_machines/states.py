"""
State enums for order models.

This module defines the state enums used by order models with django-fsm.
These are Django TextChoices for database storage and admin integration.

State Machines Overview:

Order Status:
    paid → refunded
    refunded → refunded (re-applied on every later refund)
"""

from django.db import models


class OrderStatus(models.TextChoices):
    """
    Status values for the Order lifecycle.

    Terminal states: REFUNDED

    State Flow:
        PAID → REFUNDED

    Note:
        Any successful refund, partial or full, moves the order to
        REFUNDED. There is no transition back to PAID.
    """

    PAID = "paid", "Paid"
    REFUNDED = "refunded", "Refunded"


__all__ = [
    "OrderStatus",
]
