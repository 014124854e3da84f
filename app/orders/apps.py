"""
Orders app configuration.

This app provides the refund ledger:
- Order totals and derived refundable balances
- Refund admission with over-refund protection
- Order status ratchet (paid -> refunded)
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Configuration for the orders application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
