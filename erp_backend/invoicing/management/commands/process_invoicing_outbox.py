# invoicing/management/commands/process_invoicing_outbox.py

from __future__ import annotations

from django.conf import settings
from django.core.management.base import BaseCommand

from invoicing.models import InvoiceRequest
from invoicing.services.outbox import process_pending


class Command(BaseCommand):
    help = "Retry pending / failed invoice requests (auto-invoicing outbox)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--max-attempts",
            type=int,
            default=None,
            help="Skip requests with this many attempts or more "
            "(default: INVOICING_OUTBOX_MAX_ATTEMPTS).",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=None,
            help="Process at most N requests.",
        )

    def handle(self, *args, **options):
        max_attempts = options.get("max_attempts")
        if max_attempts is None:
            max_attempts = int(getattr(settings, "INVOICING_OUTBOX_MAX_ATTEMPTS", 5))

        self.stdout.write(self.style.MIGRATE_HEADING("Invoicing outbox"))
        self.stdout.write(f"Max attempts: {max_attempts}")

        processed = process_pending(max_attempts=max_attempts, limit=options.get("limit"))

        done = sum(1 for r in processed if r.status == InvoiceRequest.STATUS_DONE)
        failed = [r for r in processed if r.status == InvoiceRequest.STATUS_FAILED]
        cancelled = sum(1 for r in processed if r.status == InvoiceRequest.STATUS_CANCELLED)

        self.stdout.write(f"Processed: {len(processed)}")
        self.stdout.write(self.style.SUCCESS(f"[OK] Done: {done}"))
        if cancelled:
            self.stdout.write(self.style.WARNING(f"[SKIP] Cancelled (receipt voided): {cancelled}"))

        if failed:
            self.stderr.write(self.style.ERROR(f"[FAIL] Failed: {len(failed)}"))
            for request in failed[:10]:
                self.stderr.write(
                    f"  request_id={request.pk} sale_id={request.sale_id} "
                    f"attempts={request.attempts} error={request.last_error}"
                )
