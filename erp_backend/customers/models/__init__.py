# customers/models/__init__.py

"""
CUSTOMERS MODELS PACKAGE EXPORTS
"""

from .account_entry import CustomerAccountEntry
from .customer import Customer

__all__ = [
    "Customer",
    "CustomerAccountEntry",
]
