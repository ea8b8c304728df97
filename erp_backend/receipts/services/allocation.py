# PATH: receipts/services/allocation.py

"""
ALLOCATION ENGINE

Distributes the collected money across the selected sales.

DESIGN PRINCIPLES:
- No database writes (mutates the given Sale instances in memory only;
  the receipt service persists them)
- Caller order is the allocation order; sales are never re-sorted
- A sale with nothing left to collect aborts the whole allocation

Per sale, while money remains:
    applied          = min(balance_due, remaining)
    amount_collected = min(amount_collected + applied, total)
    balance_due      = total - amount_collected

amount_due is the outstanding balance of every selected sale, including
sales the money never reaches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.utils import timezone

from receipts.services.exceptions import ReceiptValidationError
from receipts.services.validation import Regularization, SaleCollection, SettlementMode
from sales.models import Sale
from sales.services.sale_lifecycle import derive_collection_state

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class AllocationLine:
    sale: Sale
    sale_number: str
    original_sale_amount: Decimal
    balance_before: Decimal
    amount_applied: Decimal
    balance_after: Decimal
    position: int


@dataclass(frozen=True)
class SettlementTotals:
    amount_due: Decimal
    amount_collected: Decimal
    change_given: Decimal
    amount_short: Decimal


@dataclass
class AllocationResult:
    lines: list = field(default_factory=list)
    totals: Optional[SettlementTotals] = None

    @property
    def allocated_sales(self) -> list:
        return [line.sale for line in self.lines]

    @property
    def amount_applied(self) -> Decimal:
        return sum((line.amount_applied for line in self.lines), ZERO)


def compute_totals(*, amount_due, amount_collected) -> SettlementTotals:
    amount_due = _money(amount_due)
    amount_collected = _money(amount_collected)
    return SettlementTotals(
        amount_due=amount_due,
        amount_collected=amount_collected,
        change_given=max(ZERO, amount_collected - amount_due),
        amount_short=max(ZERO, amount_due - amount_collected),
    )


def _apply_to_sale(sale: Sale, applied: Decimal, *, now) -> None:
    total = _money(sale.total)
    sale.amount_collected = min(_money(sale.amount_collected) + applied, total)
    sale.balance_due = total - sale.amount_collected
    sale.last_collection_at = now

    new_state = derive_collection_state(total=total, amount_collected=sale.amount_collected)
    if new_state != Sale.COLLECTION_UNPAID:
        sale.collection_state = new_state

    if new_state == Sale.COLLECTION_SETTLED and sale.status == Sale.STATUS_CONFIRMED:
        sale.granular_state = Sale.GRANULAR_COLLECTED


def allocate(*, mode: SettlementMode, sales, total_collected, now=None) -> AllocationResult:
    total_collected = _money(total_collected)

    if isinstance(mode, Regularization):
        return AllocationResult(
            lines=[],
            totals=compute_totals(amount_due=total_collected, amount_collected=total_collected),
        )

    if not isinstance(mode, SaleCollection):
        raise TypeError(f"Unknown settlement mode: {mode!r}")

    # nothing is allocated unless every selected sale still owes money
    for sale in sales:
        if _money(sale.balance_due) <= 0:
            raise ReceiptValidationError(f"Sale {sale.number} has no outstanding balance")

    # every selected sale counts toward what is owed, paid this round or not
    amount_due = sum((_money(sale.balance_due) for sale in sales), ZERO)

    now = now or timezone.now()
    remaining = total_collected
    lines: list[AllocationLine] = []

    for position, sale in enumerate(sales):
        if remaining <= 0:
            break

        balance_before = _money(sale.balance_due)
        applied = min(balance_before, remaining)

        _apply_to_sale(sale, applied, now=now)
        remaining -= applied

        lines.append(
            AllocationLine(
                sale=sale,
                sale_number=sale.number,
                original_sale_amount=_money(sale.total),
                balance_before=balance_before,
                amount_applied=applied,
                balance_after=balance_before - applied,
                position=position,
            )
        )

    return AllocationResult(
        lines=lines,
        totals=compute_totals(amount_due=amount_due, amount_collected=total_collected),
    )
