# PATH: receipts/services/validation.py

"""
SETTLEMENT REQUEST VALIDATOR

Checks, in order (first failure aborts, nothing is written):
1) customer present
2) tenders present, amounts > 0, methods from the closed routing table,
   banks known, check details well-formed
3) creator present
4) mode: Regularization (no sales) | SaleCollection(sale_ids), no duplicates
5) collection timing known

Then, inside the receipt transaction:
6) customer resolves (row locked)
7) every sale resolves, all belong to one customer, and that customer is
   the receipt's customer (rows locked in pk order, returned in caller order)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from django.utils.dateparse import parse_date

from customers.models import Customer
from receipts.models import Receipt, ReceiptTender
from receipts.services.exceptions import ReceiptNotFoundError, ReceiptValidationError
from sales.models import Sale
from treasury.routing import METHOD_CHECK, PAYMENT_METHODS, is_known_account

TWOPLACES = Decimal("0.01")

TIMINGS = {value for value, _label in Receipt.TIMING_CHOICES}
CHECK_STATUSES = {value for value, _label in ReceiptTender.CHECK_STATUS_CHOICES}


# ============================================================
# SETTLEMENT MODE (tagged variant)
# ============================================================


@dataclass(frozen=True)
class Regularization:
    """Generic debt reduction, not tied to specific sales."""

    name = Receipt.MODE_REGULARIZATION


@dataclass(frozen=True)
class SaleCollection:
    sale_ids: tuple

    name = Receipt.MODE_SALE_COLLECTION


SettlementMode = Union[Regularization, SaleCollection]


# ============================================================
# VALIDATED INPUT
# ============================================================


@dataclass(frozen=True)
class CheckDetails:
    number: str
    bank: str
    issue_date: date
    due_date: date
    holder: str
    holder_tax_id: str = ""
    status: str = ReceiptTender.CHECK_PENDING


@dataclass(frozen=True)
class TenderLine:
    payment_method: str
    amount: Decimal
    bank: str = ""
    reference: str = ""
    check: Optional[CheckDetails] = None
    observations: str = ""


@dataclass(frozen=True)
class SettlementRequest:
    customer_id: uuid.UUID
    mode: SettlementMode
    tenders: tuple
    collection_timing: str
    observations: str
    creator: object

    @property
    def total_tendered(self) -> Decimal:
        return sum((t.amount for t in self.tenders), Decimal("0.00"))


# ============================================================
# HELPERS
# ============================================================


def _as_uuid(value, *, label: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError) as exc:
        raise ReceiptValidationError(f"{label} is not a valid id: {value!r}") from exc


def _as_amount(value, *, position: int) -> Decimal:
    try:
        amount = Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ReceiptValidationError(f"Tender #{position}: amount is not a number") from exc

    if not amount.is_finite() or amount <= 0:
        raise ReceiptValidationError(f"Tender #{position}: amount must be greater than 0")
    return amount


def _as_date(value, *, label: str) -> date:
    if isinstance(value, date):
        return value
    parsed = parse_date(str(value or ""))
    if parsed is None:
        raise ReceiptValidationError(f"{label} must be a date (YYYY-MM-DD)")
    return parsed


def _get(data, key, default=None):
    if isinstance(data, dict):
        return data.get(key, default)
    return getattr(data, key, default)


def _validate_check(raw, *, position: int) -> CheckDetails:
    label = f"Tender #{position} check"

    number = str(_get(raw, "number") or "").strip()
    bank = str(_get(raw, "bank") or "").strip()
    holder = str(_get(raw, "holder") or "").strip()

    if not number:
        raise ReceiptValidationError(f"{label}: number is required")
    if not bank:
        raise ReceiptValidationError(f"{label}: issuing bank is required")
    if not holder:
        raise ReceiptValidationError(f"{label}: holder is required")

    issue_date = _as_date(_get(raw, "issue_date"), label=f"{label}: issue_date")
    due_date = _as_date(_get(raw, "due_date"), label=f"{label}: due_date")
    if due_date < issue_date:
        raise ReceiptValidationError(f"{label}: due_date cannot be before issue_date")

    status = str(_get(raw, "status") or ReceiptTender.CHECK_PENDING).strip()
    if status not in CHECK_STATUSES:
        raise ReceiptValidationError(f"{label}: unknown status {status!r}")

    return CheckDetails(
        number=number,
        bank=bank,
        issue_date=issue_date,
        due_date=due_date,
        holder=holder,
        holder_tax_id=str(_get(raw, "holder_tax_id") or "").strip(),
        status=status,
    )


def _validate_tender(raw, *, position: int) -> TenderLine:
    method = str(_get(raw, "payment_method") or "").strip()
    if method not in PAYMENT_METHODS:
        raise ReceiptValidationError(f"Tender #{position}: unknown payment method {method!r}")

    amount = _as_amount(_get(raw, "amount"), position=position)

    bank = str(_get(raw, "bank") or "").strip()
    if bank and not is_known_account(bank):
        raise ReceiptValidationError(f"Tender #{position}: unknown bank {bank!r}")

    raw_check = _get(raw, "check")
    check = None
    if raw_check:
        if method != METHOD_CHECK:
            raise ReceiptValidationError(f"Tender #{position}: check details are only allowed for check tenders")
        check = _validate_check(raw_check, position=position)

    return TenderLine(
        payment_method=method,
        amount=amount,
        bank=bank,
        reference=str(_get(raw, "reference") or "").strip(),
        check=check,
        observations=str(_get(raw, "observations") or "").strip(),
    )


def settlement_mode_for(sale_ids) -> SettlementMode:
    if not sale_ids:
        return Regularization()

    ids = tuple(_as_uuid(s, label="sale_id") for s in sale_ids)
    if len(set(ids)) != len(ids):
        raise ReceiptValidationError("The same sale was selected more than once")
    return SaleCollection(sale_ids=ids)


# ============================================================
# PURE VALIDATION (no database access)
# ============================================================


def validate_settlement_request(
    *,
    customer_id,
    sale_ids=None,
    tenders=None,
    collection_timing=None,
    observations: str = "",
    creator=None,
) -> SettlementRequest:
    # 1) customer
    if not customer_id:
        raise ReceiptValidationError("customer_id is required")
    customer_uuid = _as_uuid(customer_id, label="customer_id")

    # 2) tenders
    if not tenders:
        raise ReceiptValidationError("At least one tender is required")
    lines = tuple(_validate_tender(raw, position=i) for i, raw in enumerate(tenders, start=1))

    # 3) creator
    if creator is None:
        raise ReceiptValidationError("creator is required")

    # 4) mode
    mode = settlement_mode_for(sale_ids)

    # 5) timing
    timing = (collection_timing or Receipt.TIMING_DEFERRED).strip()
    if timing not in TIMINGS:
        raise ReceiptValidationError(f"Unknown collection_timing {timing!r}")

    observations = (observations or "").strip()
    if not observations and isinstance(mode, Regularization):
        observations = Receipt.REGULARIZATION_OBSERVATIONS

    return SettlementRequest(
        customer_id=customer_uuid,
        mode=mode,
        tenders=lines,
        collection_timing=timing,
        observations=observations,
        creator=creator,
    )


# ============================================================
# RESOLUTION (inside the receipt transaction)
# ============================================================


def resolve_customer(customer_id) -> Customer:
    try:
        return Customer.objects.select_for_update().get(pk=customer_id)
    except Customer.DoesNotExist as exc:
        raise ReceiptNotFoundError(f"Customer {customer_id} not found") from exc


def resolve_sales(*, mode: SettlementMode, customer: Customer) -> list[Sale]:
    if isinstance(mode, Regularization):
        return []
    if not isinstance(mode, SaleCollection):
        raise TypeError(f"Unknown settlement mode: {mode!r}")

    # lock in pk order, hand back in caller order
    locked = list(Sale.objects.select_for_update().filter(pk__in=mode.sale_ids).order_by("pk"))
    if len(locked) != len(mode.sale_ids):
        found = {s.pk for s in locked}
        missing = [str(s) for s in mode.sale_ids if s not in found]
        raise ReceiptNotFoundError(f"Sales not found: {', '.join(missing)}")

    by_id = {s.pk: s for s in locked}
    sales = [by_id[sale_id] for sale_id in mode.sale_ids]

    if len({s.customer_id for s in sales}) != 1:
        raise ReceiptValidationError("All selected sales must belong to the same customer")
    if sales[0].customer_id != customer.pk:
        raise ReceiptValidationError("The selected sales do not belong to this customer")

    for sale in sales:
        if not sale.is_collectible:
            raise ReceiptValidationError(f"Sale {sale.number} is {sale.status} and cannot be collected")

    return sales
