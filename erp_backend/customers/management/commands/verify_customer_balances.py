# customers/management/commands/verify_customer_balances.py

from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand

from customers.models import Customer
from customers.services.account_ledger import last_active_entry


class Command(BaseCommand):
    help = "Validate Customer.running_balance against each customer's latest active ledger entry."

    def add_arguments(self, parser):
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any mismatch is found.",
        )

    def handle(self, *args, **options):
        strict = bool(options.get("strict"))

        self.stdout.write(self.style.MIGRATE_HEADING("Customer balance verification"))

        mismatches = []
        checked = 0

        for customer in Customer.objects.order_by("document_number").iterator():
            checked += 1
            entry = last_active_entry(customer)
            expected = entry.balance if entry is not None else Decimal("0.00")

            if customer.running_balance != expected:
                mismatches.append((customer, expected))

        self.stdout.write(f"Customers checked: {checked}")

        if mismatches:
            self.stderr.write(self.style.ERROR(f"[FAIL] Balance mismatches: {len(mismatches)}"))
            for customer, expected in mismatches[:10]:
                self.stderr.write(
                    f"  customer={customer.document_number} "
                    f"running_balance={customer.running_balance} ledger={expected}"
                )
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Running balances match the account ledger"))

        return self._exit(strict and bool(mismatches))

    def _exit(self, fail: bool):
        if fail:
            raise SystemExit(1)
        return None
