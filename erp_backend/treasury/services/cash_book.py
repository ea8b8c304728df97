# PATH: treasury/services/cash_book.py

"""
CASH BOOK SERVICE

Responsibilities:
- Record one inflow CashEntry per money-moving receipt tender
- Compensate a voided receipt with one outflow per original inflow

Rules:
- account_credit tenders never reach the cash book (no money moved)
- Every entry written here is linked (locked) to its receipt
- Routing comes ONLY from treasury.routing
"""

from __future__ import annotations

import logging

from django.db import transaction

from treasury.models import CashEntry
from treasury.routing import resolve_destination

logger = logging.getLogger("treasury")


def _collection_detail(receipt, tender) -> str:
    number = getattr(receipt, "number", "") or ""
    detail = f"Collection receipt {number} - {receipt.customer_name}"
    if tender.observations:
        detail = f"{detail} - {tender.observations}"
    return detail[:255]


@transaction.atomic
def record_receipt_inflows(*, receipt, tenders) -> list[CashEntry]:
    """
    Returns the created entries, in tender order.
    """
    entries: list[CashEntry] = []

    for tender in tenders:
        destination = resolve_destination(tender.payment_method, tender.bank or None)
        if destination is None:
            continue

        entry = CashEntry.objects.create(
            date=receipt.date,
            category=destination.category,
            sub_category=destination.sub_category,
            payment_method=destination.book_method,
            direction=CashEntry.DIRECTION_INFLOW,
            amount=tender.amount,
            account=destination.account,
            check_number=tender.check_number or "",
            counterparty=receipt.customer_name,
            detail=_collection_detail(receipt, tender),
            comment=(receipt.observations or f"Receipt {receipt.number}")[:255],
            confirmed=True,
            receipt=receipt,
        )
        entries.append(entry)

    logger.info(
        "Receipt inflows recorded",
        extra={"receipt_id": str(receipt.pk), "entries": len(entries)},
    )
    return entries


@transaction.atomic
def compensate_receipt_entries(*, receipt, reason: str = "") -> list[CashEntry]:
    """
    Append one outflow per uncompensated inflow of the receipt.
    """
    originals = (
        CashEntry.objects.select_for_update(of=("self",))
        .filter(
            receipt=receipt,
            direction=CashEntry.DIRECTION_INFLOW,
            reversed_by__isnull=True,
        )
        .order_by("created_at")
    )

    compensations: list[CashEntry] = []
    for original in originals:
        comment = f"Void of receipt {receipt.number}"
        if reason:
            comment = f"{comment}: {reason}"

        compensations.append(
            CashEntry.objects.create(
                category=original.category,
                sub_category=original.sub_category,
                payment_method=original.payment_method,
                direction=CashEntry.DIRECTION_OUTFLOW,
                amount=original.amount,
                account=original.account,
                check_number=original.check_number,
                counterparty=original.counterparty,
                detail=f"Reversal - {original.detail}"[:255],
                comment=comment[:255],
                confirmed=True,
                receipt=receipt,
                reverses=original,
            )
        )

    logger.info(
        "Receipt inflows compensated",
        extra={"receipt_id": str(receipt.pk), "entries": len(compensations)},
    )
    return compensations
