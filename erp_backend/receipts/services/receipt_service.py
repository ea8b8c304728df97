# PATH: receipts/services/receipt_service.py

"""
RECEIPT SERVICE (CREATE)

Flow:
1) validate the request (pure, nothing touched yet)
2) inside ONE atomic block:
   - lock + resolve customer and sales
   - allocate the collected money across the sales (caller order)
   - write Receipt, tenders, allocations; persist the touched sales
   - post the real-money portion to the customer ledger
   - record one cash-book inflow per money-moving tender
   - enqueue invoice requests (outbox)
3) after commit: dispatch this receipt's invoice requests

Any error inside (2) rolls back every write.
Invoicing failures in (3) never affect the committed receipt.
"""

from __future__ import annotations

import logging

from django.db import transaction

from invoicing.services.outbox import dispatch_receipt, enqueue_for_receipt
from receipts.models import Receipt, ReceiptAllocation, ReceiptTender
from receipts.services.allocation import allocate
from receipts.services.ledger_posting import post_receipt
from receipts.services.validation import (
    SaleCollection,
    resolve_customer,
    resolve_sales,
    validate_settlement_request,
)
from treasury.services.cash_book import record_receipt_inflows

logger = logging.getLogger("receipts")

SALE_COLLECTION_FIELDS = [
    "amount_collected",
    "balance_due",
    "collection_state",
    "granular_state",
    "last_collection_at",
    "updated_at",
]


def _username(user) -> str:
    return getattr(user, "username", None) or getattr(user, "email", "") or "system"


def _create_tenders(receipt: Receipt, lines) -> list[ReceiptTender]:
    tenders = []
    for position, line in enumerate(lines):
        check = line.check
        tenders.append(
            ReceiptTender.objects.create(
                receipt=receipt,
                payment_method=line.payment_method,
                amount=line.amount,
                bank=line.bank,
                reference=line.reference,
                check_number=check.number if check else "",
                check_bank=check.bank if check else "",
                check_issue_date=check.issue_date if check else None,
                check_due_date=check.due_date if check else None,
                check_holder=check.holder if check else "",
                check_holder_tax_id=check.holder_tax_id if check else "",
                check_status=check.status if check else "",
                observations=line.observations,
                position=position,
            )
        )
    return tenders


def _create_allocations(receipt: Receipt, lines) -> list[ReceiptAllocation]:
    allocations = []
    for line in lines:
        sale = line.sale
        sale.save(update_fields=SALE_COLLECTION_FIELDS)
        sale.receipts.add(receipt)

        allocations.append(
            ReceiptAllocation.objects.create(
                receipt=receipt,
                sale=sale,
                sale_number=line.sale_number,
                original_sale_amount=line.original_sale_amount,
                balance_before=line.balance_before,
                amount_applied=line.amount_applied,
                balance_after=line.balance_after,
                position=line.position,
            )
        )
    return allocations


def create_receipt(
    *,
    customer_id,
    sale_ids=None,
    tenders=None,
    collection_timing=None,
    observations: str = "",
    creator=None,
) -> Receipt:
    request = validate_settlement_request(
        customer_id=customer_id,
        sale_ids=sale_ids,
        tenders=tenders,
        collection_timing=collection_timing,
        observations=observations,
        creator=creator,
    )

    with transaction.atomic():
        customer = resolve_customer(request.customer_id)
        sales = resolve_sales(mode=request.mode, customer=customer)

        result = allocate(
            mode=request.mode,
            sales=sales,
            total_collected=request.total_tendered,
        )
        totals = result.totals

        receipt = Receipt.objects.create(
            customer=customer,
            customer_name=customer.display_name,
            customer_document=customer.document_number,
            mode=request.mode.name,
            amount_due=totals.amount_due,
            amount_collected=totals.amount_collected,
            change_given=totals.change_given,
            amount_short=totals.amount_short,
            collection_timing=request.collection_timing,
            observations=request.observations,
            created_by=request.creator,
        )

        tender_rows = _create_tenders(receipt, request.tenders)
        _create_allocations(receipt, result.lines)

        post_receipt(receipt=receipt, tenders=tender_rows, customer=customer, user=request.creator)
        record_receipt_inflows(receipt=receipt, tenders=tender_rows)

        invoice_requests = []
        if isinstance(request.mode, SaleCollection):
            invoice_requests = enqueue_for_receipt(receipt=receipt, sales=result.allocated_sales)

        if invoice_requests:
            receipt_pk, username = receipt.pk, _username(request.creator)
            # robust: an invoicing error after commit is logged, the receipt stands
            transaction.on_commit(
                lambda: dispatch_receipt(receipt_pk, username=username),
                robust=True,
            )

    logger.info(
        "Receipt created",
        extra={
            "receipt_id": str(receipt.pk),
            "number": receipt.number,
            "customer_id": str(customer.pk),
            "mode": receipt.mode,
            "amount_collected": str(receipt.amount_collected),
            "allocations": len(result.lines),
        },
    )
    return receipt
