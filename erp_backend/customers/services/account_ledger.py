# PATH: customers/services/account_ledger.py

"""
CUSTOMER ACCOUNT LEDGER SERVICE

Single writer of:
- CustomerAccountEntry rows
- Customer.running_balance

Rules:
- Every posting locks the customer row (select_for_update) and reads the
  prior balance from customer.running_balance, never from a
  "latest entry by date" scan.
- The new entry and the new running_balance are written in the same
  transaction.
- Positive balance = the customer owes us.

Entry effects:
- sale / debit note / charge        -> debit  (balance goes up)
- receipt / credit note / discount  -> credit (balance goes down)
- receipt_reversal                  -> debit  (undoes a receipt credit)
"""

from __future__ import annotations

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.db import transaction
from django.utils import timezone

from customers.models import Customer, CustomerAccountEntry

logger = logging.getLogger("customers")

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


class AccountLedgerError(ValueError):
    pass


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _lock_customer(customer_or_id) -> Customer:
    customer_id = getattr(customer_or_id, "pk", customer_or_id)
    return Customer.objects.select_for_update().get(pk=customer_id)


@transaction.atomic
def _post(
    *,
    customer,
    entry_type: str,
    debit=ZERO,
    credit=ZERO,
    document_type: str = "",
    document_number: str = "",
    document_id=None,
    concept: str = "",
    user=None,
    date=None,
) -> CustomerAccountEntry:
    debit = _money(debit)
    credit = _money(credit)

    if debit < 0 or credit < 0:
        raise AccountLedgerError("Ledger amounts must be >= 0")
    if (debit > 0) == (credit > 0):
        raise AccountLedgerError("Exactly one of debit / credit must be positive")

    locked = _lock_customer(customer)

    prior = _money(locked.running_balance)
    new_balance = _money(prior - credit + debit)

    entry = CustomerAccountEntry.objects.create(
        customer=locked,
        date=date or timezone.now(),
        entry_type=entry_type,
        document_type=document_type,
        document_number=document_number,
        document_id=document_id,
        concept=concept,
        debit=debit,
        credit=credit,
        balance=new_balance,
        created_by=user,
    )

    locked.running_balance = new_balance
    locked.save(update_fields=["running_balance", "updated_at"])

    # keep the caller's instance in sync
    if isinstance(customer, Customer):
        customer.running_balance = new_balance

    logger.info(
        "Account entry posted",
        extra={
            "customer_id": str(locked.pk),
            "entry_type": entry_type,
            "debit": str(debit),
            "credit": str(credit),
            "prior_balance": str(prior),
            "balance": str(new_balance),
            "document_number": document_number,
        },
    )
    return entry


def post_receipt_credit(*, customer, amount, receipt, user=None) -> CustomerAccountEntry:
    """
    Real money collected: reduces the customer's debt.
    """
    return _post(
        customer=customer,
        entry_type=CustomerAccountEntry.TYPE_RECEIPT,
        credit=amount,
        document_type="receipt",
        document_number=getattr(receipt, "number", "") or "",
        document_id=receipt.pk,
        concept=f"Receipt {getattr(receipt, 'number', '')}".strip(),
        user=user,
    )


def post_receipt_reversal(*, customer, amount, receipt, reason: str = "", user=None) -> CustomerAccountEntry:
    """
    A voided receipt: the debt it cancelled comes back.
    """
    number = getattr(receipt, "number", "") or ""
    concept = f"Void of receipt {number}".strip()
    if reason:
        concept = f"{concept}: {reason}"[:255]

    return _post(
        customer=customer,
        entry_type=CustomerAccountEntry.TYPE_RECEIPT_REVERSAL,
        debit=amount,
        document_type="receipt",
        document_number=number,
        document_id=receipt.pk,
        concept=concept,
        user=user,
    )


def post_sale_charge(*, customer, sale, user=None) -> CustomerAccountEntry:
    """
    A confirmed sale on account: the customer now owes its total.
    """
    return _post(
        customer=customer,
        entry_type=CustomerAccountEntry.TYPE_SALE,
        debit=sale.total,
        document_type="sale",
        document_number=sale.number or "",
        document_id=sale.pk,
        concept=f"Sale {sale.number}",
        user=user,
    )


def post_sale_cancellation(*, customer, sale, user=None) -> CustomerAccountEntry:
    """
    A confirmed sale was cancelled: its charge is credited back.
    """
    return _post(
        customer=customer,
        entry_type=CustomerAccountEntry.TYPE_CREDIT_NOTE,
        credit=sale.total,
        document_type="sale",
        document_number=sale.number or "",
        document_id=sale.pk,
        concept=f"Cancellation of sale {sale.number}",
        user=user,
    )


def last_active_entry(customer) -> Optional[CustomerAccountEntry]:
    customer_id = getattr(customer, "pk", customer)
    return (
        CustomerAccountEntry.objects.filter(customer_id=customer_id, voided=False)
        .order_by("-date", "-created_at")
        .first()
    )


def account_statement(customer, *, date_from=None, date_to=None):
    qs = CustomerAccountEntry.objects.filter(customer=customer).select_related("created_by")
    if date_from:
        qs = qs.filter(date__date__gte=date_from)
    if date_to:
        qs = qs.filter(date__date__lte=date_to)
    return qs.order_by("date", "created_at")
