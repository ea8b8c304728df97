# PATH: receipts/services/ledger_posting.py

"""
RECEIPT → CUSTOMER LEDGER

Only real money reaches the customer's account ledger:
    cash_total = sum(tender.amount for non account_credit tenders)

- cash_total > 0  -> one "receipt" credit entry (debt goes down)
- cash_total == 0 -> nothing; account-credit settlements were already
  reflected when the sale was charged
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from customers.models import CustomerAccountEntry
from customers.services.account_ledger import post_receipt_credit, post_receipt_reversal
from treasury.routing import moves_money


def cash_total(tenders) -> Decimal:
    return sum(
        (Decimal(t.amount) for t in tenders if moves_money(t.payment_method)),
        Decimal("0.00"),
    )


def post_receipt(*, receipt, tenders, customer, user=None) -> Optional[CustomerAccountEntry]:
    amount = cash_total(tenders)
    if amount <= 0:
        return None
    return post_receipt_credit(customer=customer, amount=amount, receipt=receipt, user=user)


def reverse_receipt(*, receipt, customer, reason: str = "", user=None) -> Optional[CustomerAccountEntry]:
    posted = CustomerAccountEntry.objects.filter(
        document_id=receipt.pk,
        entry_type=CustomerAccountEntry.TYPE_RECEIPT,
        voided=False,
    ).first()
    if posted is None:
        return None

    return post_receipt_reversal(
        customer=customer,
        amount=posted.credit,
        receipt=receipt,
        reason=reason,
        user=user,
    )
