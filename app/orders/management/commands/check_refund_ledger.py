"""
Check that every order agrees with its refund ledger.

Usage:
    python app/manage.py check_refund_ledger

Exits non-zero when any order is over-refunded or carries a status that
disagrees with its refunds.
"""

from django.core.management.base import BaseCommand, CommandError

from orders.services import LedgerAuditService


class Command(BaseCommand):
    help = "Check orders against their refunds and report ledger inconsistencies."

    def handle(self, *args, **options):
        inconsistencies = LedgerAuditService.find_over_refunded_orders()

        if not inconsistencies:
            self.stdout.write(self.style.SUCCESS("Refund ledger is consistent."))
            return

        for item in inconsistencies:
            self.stderr.write(
                f"{item.order_id}: {item.inconsistency_type.value} "
                f"(status={item.status}, total={item.total_in_cents}, "
                f"refunded={item.refunded_amount_in_cents}, "
                f"refunds={item.refund_count})"
            )

        raise CommandError(
            f"Found {len(inconsistencies)} refund ledger inconsistencies."
        )
