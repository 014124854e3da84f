"""
Tests for optimistic locking utilities.

Tests check_version, save_if_version and the version field behavior on
orders for detecting concurrent modifications.
"""

import uuid

import pytest
from django.db import transaction

from core.exceptions import NotFoundError
from orders.exceptions import ConcurrencyConflictError
from orders.locks import check_version, save_if_version
from orders.models import Order
from orders.state_machines import OrderStatus


class TestCheckVersion:
    """Tests for check_version function."""

    def test_returns_instance_when_version_matches(self, db, paid_order):
        """Should return locked instance when version matches."""
        with transaction.atomic():
            result = check_version(Order, paid_order.pk, expected_version=1)

        assert result.pk == paid_order.pk
        assert result.version == 1

    def test_skips_version_check_without_expected_version(self, db, paid_order):
        """Should only lock when no version is expected."""
        paid_order.save()

        result = check_version(Order, paid_order.pk)

        assert result.version == 2

    def test_raises_conflict_when_version_mismatch(self, db, paid_order):
        """Should raise ConcurrencyConflictError when version doesn't match."""
        with pytest.raises(ConcurrencyConflictError) as exc_info:
            check_version(Order, paid_order.pk, expected_version=999)

        assert "has been modified" in str(exc_info.value)
        assert exc_info.value.error_code == "CONCURRENCY_CONFLICT"
        assert exc_info.value.details["pk"] == str(paid_order.pk)
        assert exc_info.value.details["expected_version"] == 999
        assert exc_info.value.details["current_version"] == 1

    def test_raises_not_found_when_record_missing(self, db):
        """Should raise NotFoundError when record doesn't exist."""
        fake_pk = uuid.uuid4()

        with pytest.raises(NotFoundError) as exc_info:
            check_version(Order, fake_pk, expected_version=1)

        assert "not found" in str(exc_info.value)
        assert exc_info.value.error_code == "ORDER_NOT_FOUND"
        assert exc_info.value.details["pk"] == str(fake_pk)


class TestSaveIfVersion:
    """Tests for save_if_version function."""

    def test_writes_fields_and_bumps_version(self, db, paid_order):
        """Should write the given fields and increment the version."""
        paid_order.mark_refunded()

        save_if_version(paid_order, ["status", "refunded_at"])

        assert paid_order.version == 2
        stored = Order.objects.get(pk=paid_order.pk)
        assert stored.status == OrderStatus.REFUNDED
        assert stored.refunded_at == paid_order.refunded_at
        assert stored.version == 2

    def test_refreshes_updated_at(self, db, paid_order):
        """Should reload updated_at from the database."""
        before = paid_order.updated_at

        save_if_version(paid_order, ["status"])

        assert paid_order.updated_at >= before
        assert paid_order.updated_at == Order.objects.get(pk=paid_order.pk).updated_at

    def test_raises_conflict_when_stale(self, db, paid_order):
        """Should write nothing when another writer bumped the version."""
        stale = Order.objects.get(pk=paid_order.pk)
        paid_order.save()

        stale.mark_refunded()
        with pytest.raises(ConcurrencyConflictError) as exc_info:
            save_if_version(stale, ["status", "refunded_at"])

        assert exc_info.value.details["expected_version"] == 1
        stored = Order.objects.get(pk=paid_order.pk)
        assert stored.status == OrderStatus.PAID
        assert stored.version == 2


class TestVersionFieldBehavior:
    """Tests for version field auto-increment behavior on orders."""

    def test_new_record_has_version_1(self, db):
        """New records should have version=1."""
        order = Order.objects.create(total_in_cents=5000)

        assert order.version == 1

    def test_version_increments_on_save(self, db, paid_order):
        """Version should increment on each save."""
        paid_order.save()

        paid_order.refresh_from_db(fields=["version"])
        assert paid_order.version == 2

    def test_version_increments_multiple_times(self, db, paid_order):
        """Version should increment correctly over multiple saves."""
        for i in range(5):
            paid_order.save()
            assert paid_order.version == i + 2

    def test_version_increments_with_update_fields(self, db, paid_order):
        """Version should increment even when update_fields is narrowed."""
        paid_order.mark_refunded()
        paid_order.save(update_fields=["status", "refunded_at"])

        stored = Order.objects.get(pk=paid_order.pk)
        assert stored.version == 2
        assert stored.status == OrderStatus.REFUNDED

    def test_each_refund_bumps_version(self, db, paid_order):
        """Version should increment once per admitted refund."""
        paid_order.refund(100)
        paid_order.refund(100)

        assert paid_order.version == 3
        assert Order.objects.get(pk=paid_order.pk).version == 3
