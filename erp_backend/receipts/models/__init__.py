# receipts/models/__init__.py

"""
RECEIPTS MODELS PACKAGE EXPORTS
"""

from .allocation import ReceiptAllocation
from .receipt import Receipt
from .tender import ReceiptTender

__all__ = [
    "Receipt",
    "ReceiptAllocation",
    "ReceiptTender",
]
