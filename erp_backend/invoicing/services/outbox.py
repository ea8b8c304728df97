# PATH: invoicing/services/outbox.py

"""
INVOICING OUTBOX

Flow:
1) enqueue_for_receipt()   inside the receipt transaction
   -> one pending InvoiceRequest per collected, not-yet-invoiced sale
      (only for customers with auto_invoicing AND requires_tax_invoice)
2) dispatch_receipt()      registered with transaction.on_commit
   -> processes that receipt's pending requests, each in its own
      transaction
3) process_pending()       management command, retries pending / failed
   requests below the attempt limit
4) cancel_for_receipt()    inside the void transaction
   -> open requests of a voided receipt are cancelled, never drafted

A failed request is recorded and logged. It never rolls back or alters
the receipt that produced it.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from invoicing.models import InvoiceRequest
from invoicing.services.draft_invoice import create_draft_invoice_for_sale
from invoicing.services.exceptions import InvoicingError, SaleAlreadyInvoicedError
from receipts.models import Receipt

logger = logging.getLogger("invoicing")


def customer_wants_auto_invoicing(customer) -> bool:
    return bool(customer.auto_invoicing and customer.requires_tax_invoice)


def enqueue_for_receipt(*, receipt, sales) -> list[InvoiceRequest]:
    if not customer_wants_auto_invoicing(receipt.customer):
        return []

    requests = [
        InvoiceRequest.objects.create(receipt=receipt, sale=sale)
        for sale in sales
        if not sale.invoiced
    ]

    if requests:
        logger.info(
            "Invoice requests enqueued",
            extra={"receipt_id": str(receipt.pk), "count": len(requests)},
        )
    return requests


def cancel_for_receipt(*, receipt, reason: str = "Receipt voided") -> int:
    cancelled = (
        InvoiceRequest.objects.filter(receipt=receipt, status__in=InvoiceRequest.OPEN_STATUSES)
        .update(status=InvoiceRequest.STATUS_CANCELLED, last_error=reason, updated_at=timezone.now())
    )

    if cancelled:
        logger.info(
            "Invoice requests cancelled",
            extra={"receipt_id": str(receipt.pk), "count": cancelled},
        )
    return cancelled


def process_request(request_id, *, username: str = "system") -> InvoiceRequest:
    with transaction.atomic():
        request = (
            InvoiceRequest.objects.select_for_update(of=("self",))
            .select_related("receipt")
            .get(pk=request_id)
        )
        if request.status not in InvoiceRequest.OPEN_STATUSES:
            return request

        if request.receipt.status == Receipt.STATUS_VOID:
            request.status = InvoiceRequest.STATUS_CANCELLED
            request.last_error = "Receipt voided"
            request.save(update_fields=["status", "last_error", "updated_at"])
            return request

        request.attempts += 1
        request.processed_at = timezone.now()

        try:
            with transaction.atomic():
                invoice = create_draft_invoice_for_sale(sale_id=request.sale_id, username=username)
        except SaleAlreadyInvoicedError as exc:
            # invoiced through another path; nothing left to do
            request.status = InvoiceRequest.STATUS_DONE
            request.last_error = str(exc)
        except InvoicingError as exc:
            request.status = InvoiceRequest.STATUS_FAILED
            request.last_error = str(exc)
            logger.warning(
                "Invoice draft failed",
                extra={"request_id": str(request.pk), "sale_id": str(request.sale_id), "error": str(exc)},
            )
        except Exception as exc:
            request.status = InvoiceRequest.STATUS_FAILED
            request.last_error = f"{type(exc).__name__}: {exc}"
            logger.exception(
                "Unexpected error drafting invoice",
                extra={"request_id": str(request.pk), "sale_id": str(request.sale_id)},
            )
        else:
            request.status = InvoiceRequest.STATUS_DONE
            request.invoice = invoice
            request.last_error = ""
            logger.info(
                "Invoice draft created",
                extra={"request_id": str(request.pk), "sale_id": str(request.sale_id), "invoice_id": str(invoice.pk)},
            )

        request.save(
            update_fields=["status", "attempts", "processed_at", "last_error", "invoice", "updated_at"]
        )
        return request


def dispatch_receipt(receipt_id, *, username: str = "system") -> list[InvoiceRequest]:
    pending_ids = list(
        InvoiceRequest.objects.filter(
            receipt_id=receipt_id,
            status=InvoiceRequest.STATUS_PENDING,
        )
        .order_by("created_at")
        .values_list("pk", flat=True)
    )
    return [process_request(pk, username=username) for pk in pending_ids]


def process_pending(*, max_attempts: int | None = None, limit: int | None = None) -> list[InvoiceRequest]:
    if max_attempts is None:
        max_attempts = int(getattr(settings, "INVOICING_OUTBOX_MAX_ATTEMPTS", 5))

    qs = (
        InvoiceRequest.objects.filter(
            status__in=InvoiceRequest.OPEN_STATUSES,
            attempts__lt=max_attempts,
        )
        .exclude(receipt__status=Receipt.STATUS_VOID)
        .select_related("receipt__created_by")
        .order_by("created_at")
    )
    if limit:
        qs = qs[:limit]

    processed = []
    for request in list(qs):
        creator = request.receipt.created_by
        username = getattr(creator, "username", None) or getattr(creator, "email", "") or "system"
        processed.append(process_request(request.pk, username=username))
    return processed
