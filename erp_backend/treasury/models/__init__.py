# treasury/models/__init__.py

from .cash_entry import CashEntry

__all__ = [
    "CashEntry",
]
