"""
State machine enums for order models.

This module defines the state enums used by order models with django-fsm.
"""

from orders.state_machines.states import OrderStatus

__all__ = [
    "OrderStatus",
]
