"""
Concurrency control utilities for refund admission.

This module provides two complementary mechanisms, used together by
refund creation:

1. **Row lock with version check** (check_version)
   - select_for_update() serialises writers on the same order
   - Version comparison detects a stale caller snapshot
   - Use for: read-balance-then-insert sequences

2. **Conditional write** (save_if_version)
   - UPDATE ... WHERE pk = ? AND version = ?
   - Rejects the losing writer on backends without row locks
   - Use for: the status update that closes a refund admission

Usage:

    from orders.locks import check_version, save_if_version

    with transaction.atomic():
        order = check_version(Order, order_id, expected_version=3)
        ...
        order.mark_refunded()
        save_if_version(order, ["status", "refunded_at"])

Note:
    Both helpers must run inside the same transaction as the writes they
    protect. The row lock is held until that transaction commits or rolls back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from core.exceptions import NotFoundError
from orders.exceptions import ConcurrencyConflictError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import Any

# Type variable for model classes
T = TypeVar("T", bound=models.Model)


def check_version(
    model_class: type[T],
    pk: Any,
    expected_version: int | None = None,
) -> T:
    """
    Lock a record for update and verify its version.

    Args:
        model_class: Django model class (must have 'version' field)
        pk: Primary key of the record
        expected_version: Version the caller expects (None skips the check)

    Returns:
        The locked model instance (within a transaction)

    Raises:
        ConcurrencyConflictError: If version doesn't match
        NotFoundError: If record doesn't exist

    Example:
        with transaction.atomic():
            order = check_version(Order, order_id, expected_version=3)
            # Exclusive access until the transaction ends
    """
    with transaction.atomic():
        instance = model_class.objects.select_for_update().filter(pk=pk).first()

        if instance is None:
            model_name = model_class.__name__
            raise NotFoundError(
                f"{model_name} {pk} not found",
                error_code=f"{model_name.upper()}_NOT_FOUND",
                details={"pk": str(pk)},
            )

        if expected_version is not None and instance.version != expected_version:
            model_name = model_class.__name__
            raise ConcurrencyConflictError(
                f"{model_name} {pk} has been modified "
                f"(expected version {expected_version}, current {instance.version})",
                details={
                    "pk": str(pk),
                    "expected_version": expected_version,
                    "current_version": instance.version,
                },
            )

        return instance


def save_if_version(instance: models.Model, fields: Iterable[str]) -> None:
    """
    Persist fields only if the stored version still matches the instance.

    Bumps the version and updated_at in the same UPDATE statement, then
    reloads both onto the instance.

    Args:
        instance: Model instance carrying the version it was read at
        fields: Names of the fields to write

    Raises:
        ConcurrencyConflictError: If another writer got there first
    """
    model_class = type(instance)
    expected_version = instance.version
    values: dict[str, Any] = {name: getattr(instance, name) for name in fields}

    rows = model_class.objects.filter(
        pk=instance.pk,
        version=expected_version,
    ).update(
        version=F("version") + 1,
        updated_at=timezone.now(),
        **values,
    )

    if rows == 0:
        raise ConcurrencyConflictError(
            f"{model_class.__name__} {instance.pk} was modified by another process",
            details={
                "pk": str(instance.pk),
                "expected_version": expected_version,
            },
        )

    instance.refresh_from_db(fields=["version", "updated_at"])


__all__ = [
    "check_version",
    "save_if_version",
]
