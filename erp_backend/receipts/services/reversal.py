# PATH: receipts/services/reversal.py

"""
REVERSAL COORDINATOR (VOID)

Undoes a receipt's effect on its sales and marks it void, all inside
one atomic block.

Per allocation:
    sale.amount_collected -= amount_applied   (floored at 0)
    sale.balance_due       = total - amount_collected
    collection state recomputed; "collected" falls back to "confirmed"
    receipt removed from sale.receipts

Open invoice requests of the receipt are cancelled.

Books:
- RECEIPT_VOID_COMPENSATES_BOOKS = True (default): the ledger credit is
  offset by a receipt_reversal debit and every cash inflow gets an
  opposite outflow.
- False: sales and receipt only; ledger and cash book keep the
  original collection.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from customers.models import Customer
from invoicing.services.outbox import cancel_for_receipt
from receipts.models import Receipt
from receipts.services.exceptions import ReceiptNotFoundError, ReceiptValidationError
from receipts.services.ledger_posting import reverse_receipt
from sales.models import Sale
from sales.services.sale_lifecycle import derive_collection_state
from treasury.services.cash_book import compensate_receipt_entries

logger = logging.getLogger("receipts")

ZERO = Decimal("0.00")
VOID_REASON_MAX_LENGTH = Receipt._meta.get_field("void_reason").max_length


def compensates_books() -> bool:
    return bool(getattr(settings, "RECEIPT_VOID_COMPENSATES_BOOKS", True))


def _restore_sale(sale: Sale, applied: Decimal, receipt: Receipt) -> None:
    sale.amount_collected = max(ZERO, Decimal(sale.amount_collected) - Decimal(applied))
    sale.balance_due = Decimal(sale.total) - sale.amount_collected
    sale.collection_state = derive_collection_state(
        total=sale.total,
        amount_collected=sale.amount_collected,
    )

    if sale.granular_state == Sale.GRANULAR_COLLECTED and sale.collection_state != Sale.COLLECTION_SETTLED:
        sale.granular_state = Sale.GRANULAR_CONFIRMED

    sale.save(
        update_fields=[
            "amount_collected",
            "balance_due",
            "collection_state",
            "granular_state",
            "updated_at",
        ]
    )
    sale.receipts.remove(receipt)


def void_receipt(*, receipt_id, void_reason: str, modifier=None) -> Receipt:
    reason = (void_reason or "").strip()
    if not reason:
        raise ReceiptValidationError("void_reason is required")
    if len(reason) > VOID_REASON_MAX_LENGTH:
        raise ReceiptValidationError(f"void_reason must be at most {VOID_REASON_MAX_LENGTH} characters")

    with transaction.atomic():
        try:
            receipt = Receipt.objects.select_for_update().get(pk=receipt_id)
        except (Receipt.DoesNotExist, DjangoValidationError, ValueError) as exc:
            raise ReceiptNotFoundError(f"Receipt {receipt_id} not found") from exc

        if receipt.status == Receipt.STATUS_VOID:
            raise ReceiptValidationError(f"Receipt {receipt.number} is already void")

        # invoice requests before sales, as the outbox does
        cancel_for_receipt(receipt=receipt)

        # same lock order as creation: customer, then sales
        customer = Customer.objects.select_for_update().get(pk=receipt.customer_id)

        allocations = list(receipt.allocations.all())
        sale_ids = sorted({a.sale_id for a in allocations})
        sales = {
            s.pk: s
            for s in Sale.objects.select_for_update().filter(pk__in=sale_ids).order_by("pk")
        }

        for allocation in allocations:
            _restore_sale(sales[allocation.sale_id], allocation.amount_applied, receipt)

        if compensates_books():
            reverse_receipt(receipt=receipt, customer=customer, reason=reason, user=modifier)
            compensate_receipt_entries(receipt=receipt, reason=reason)

        receipt.status = Receipt.STATUS_VOID
        receipt.void_reason = reason
        receipt.voided_at = timezone.now()
        receipt.modified_by = modifier
        receipt.save(update_fields=["status", "void_reason", "voided_at", "modified_by", "updated_at"])

    logger.info(
        "Receipt voided",
        extra={
            "receipt_id": str(receipt.pk),
            "number": receipt.number,
            "sales_restored": len(allocations),
            "books_compensated": compensates_books(),
        },
    )
    return receipt
