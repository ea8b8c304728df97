"""
SALE LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Sale entities, and how the collection state is derived
from the collected amount.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from decimal import Decimal

from sales.models import Sale

# ============================================================
# DOMAIN ERRORS
# ============================================================


class SaleLifecycleError(Exception):
    pass


class InvalidSaleTransitionError(SaleLifecycleError):
    pass


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Sale.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Sale.STATUS_PENDING: {
        Sale.STATUS_CONFIRMED,
        Sale.STATUS_CANCELLED,
    },
    Sale.STATUS_CONFIRMED: {
        Sale.STATUS_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, sale: Sale, target_status: str):
    if not can_transition(
        from_status=sale.status,
        to_status=target_status,
    ):
        raise InvalidSaleTransitionError(
            f"Sale {sale.id} cannot transition from "
            f"'{sale.status}' to '{target_status}'"
        )


def derive_collection_state(*, total, amount_collected) -> str:
    """
    settled  -> nothing left to collect
    partial  -> something collected, balance remains
    unpaid   -> nothing collected
    """
    total = Decimal(total or "0.00")
    amount_collected = Decimal(amount_collected or "0.00")

    if total - amount_collected <= 0:
        return Sale.COLLECTION_SETTLED
    if amount_collected > 0:
        return Sale.COLLECTION_PARTIAL
    return Sale.COLLECTION_UNPAID
