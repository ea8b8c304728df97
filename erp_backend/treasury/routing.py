# treasury/routing.py

"""
======================================================
PATH: treasury/routing.py
======================================================
PAYMENT METHOD → TREASURY ROUTING TABLE

Closed, versioned table. Every customer payment method the receipts
engine accepts is listed here, and nothing else is accepted.

Each route answers:
- does this method move physical money? (account_credit does not)
- which treasury account receives it (tender bank, else the default)
- which label the cash book uses for it

Bump ROUTING_TABLE_VERSION whenever a route changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


ROUTING_TABLE_VERSION = 1


# =========================================================
# TREASURY ACCOUNTS
# =========================================================
ACCOUNT_PROVINCIA = "PROVINCIA"
ACCOUNT_SANTANDER = "SANTANDER"
ACCOUNT_CASH = "CASH"
ACCOUNT_FCI = "FCI"
ACCOUNT_RESERVE = "RESERVE"

TREASURY_ACCOUNTS = (
    ACCOUNT_PROVINCIA,
    ACCOUNT_SANTANDER,
    ACCOUNT_CASH,
    ACCOUNT_FCI,
    ACCOUNT_RESERVE,
)

TREASURY_ACCOUNT_CHOICES = [
    (ACCOUNT_PROVINCIA, "Banco Provincia"),
    (ACCOUNT_SANTANDER, "Banco Santander"),
    (ACCOUNT_CASH, "Cash"),
    (ACCOUNT_FCI, "FCI"),
    (ACCOUNT_RESERVE, "Reserve"),
]


# =========================================================
# CUSTOMER PAYMENT METHODS (RECEIPT TENDERS)
# =========================================================
METHOD_CASH = "cash"
METHOD_TRANSFER = "transfer"
METHOD_CHECK = "check"
METHOD_DEBIT_CARD = "debit_card"
METHOD_CREDIT_CARD = "credit_card"
METHOD_ACCOUNT_CREDIT = "account_credit"

PAYMENT_METHOD_CHOICES = [
    (METHOD_CASH, "Cash"),
    (METHOD_TRANSFER, "Bank transfer"),
    (METHOD_CHECK, "Check"),
    (METHOD_DEBIT_CARD, "Debit card"),
    (METHOD_CREDIT_CARD, "Credit card"),
    (METHOD_ACCOUNT_CREDIT, "Account credit"),
]


# =========================================================
# CASH BOOK LABELS
# =========================================================
BOOK_CASH = "cash"
BOOK_TRANSFER = "transfer"
BOOK_THIRD_PARTY_CHECK = "third_party_check"
BOOK_DEBIT_CARD = "debit_card"
BOOK_CREDIT_CARD = "credit_card"

BOOK_METHOD_CHOICES = [
    (BOOK_CASH, "Cash"),
    (BOOK_TRANSFER, "Transfer"),
    (BOOK_THIRD_PARTY_CHECK, "Third-party check"),
    (BOOK_DEBIT_CARD, "Debit card"),
    (BOOK_CREDIT_CARD, "Credit card"),
]

CATEGORY_SALE_COLLECTION = "sale_collection"
SUB_CATEGORY_COLLECTION = "collection"


class UnknownPaymentMethodError(ValueError):
    pass


@dataclass(frozen=True)
class PaymentRoute:
    method: str
    moves_money: bool
    default_account: Optional[str] = None
    accepts_bank: bool = False
    book_method: Optional[str] = None


@dataclass(frozen=True)
class CashDestination:
    account: str
    category: str
    sub_category: str
    book_method: str


ROUTES: dict[str, PaymentRoute] = {
    METHOD_CASH: PaymentRoute(
        method=METHOD_CASH,
        moves_money=True,
        default_account=ACCOUNT_CASH,
        book_method=BOOK_CASH,
    ),
    METHOD_TRANSFER: PaymentRoute(
        method=METHOD_TRANSFER,
        moves_money=True,
        default_account=ACCOUNT_PROVINCIA,
        accepts_bank=True,
        book_method=BOOK_TRANSFER,
    ),
    METHOD_CHECK: PaymentRoute(
        method=METHOD_CHECK,
        moves_money=True,
        default_account=ACCOUNT_PROVINCIA,
        accepts_bank=True,
        # the customer pays with a check issued by someone else
        book_method=BOOK_THIRD_PARTY_CHECK,
    ),
    METHOD_DEBIT_CARD: PaymentRoute(
        method=METHOD_DEBIT_CARD,
        moves_money=True,
        default_account=ACCOUNT_SANTANDER,
        accepts_bank=True,
        book_method=BOOK_DEBIT_CARD,
    ),
    METHOD_CREDIT_CARD: PaymentRoute(
        method=METHOD_CREDIT_CARD,
        moves_money=True,
        default_account=ACCOUNT_SANTANDER,
        accepts_bank=True,
        book_method=BOOK_CREDIT_CARD,
    ),
    METHOD_ACCOUNT_CREDIT: PaymentRoute(
        method=METHOD_ACCOUNT_CREDIT,
        moves_money=False,
    ),
}

PAYMENT_METHODS = frozenset(ROUTES)


def get_route(method: str) -> PaymentRoute:
    try:
        return ROUTES[method]
    except KeyError as exc:
        raise UnknownPaymentMethodError(f"Unknown payment method: {method!r}") from exc


def moves_money(method: str) -> bool:
    return get_route(method).moves_money


def is_known_account(account: str) -> bool:
    return account in TREASURY_ACCOUNTS


def resolve_destination(method: str, bank: Optional[str] = None) -> Optional[CashDestination]:
    """
    Where a tender lands in the cash book.

    Returns None for methods that move no money (account_credit).
    """
    route = get_route(method)
    if not route.moves_money:
        return None

    account = route.default_account
    if route.accepts_bank and bank:
        account = bank

    return CashDestination(
        account=account,
        category=CATEGORY_SALE_COLLECTION,
        sub_category=SUB_CATEGORY_COLLECTION,
        book_method=route.book_method,
    )
