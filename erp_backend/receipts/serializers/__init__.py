# receipts/serializers/__init__.py

from .receipt_command import (
    CheckInputSerializer,
    ReceiptCreateSerializer,
    ReceiptVoidSerializer,
    TenderInputSerializer,
)
from .receipt_read import (
    ReceiptAllocationSerializer,
    ReceiptSerializer,
    ReceiptTenderSerializer,
)

__all__ = [
    "CheckInputSerializer",
    "TenderInputSerializer",
    "ReceiptCreateSerializer",
    "ReceiptVoidSerializer",
    "ReceiptSerializer",
    "ReceiptAllocationSerializer",
    "ReceiptTenderSerializer",
]
