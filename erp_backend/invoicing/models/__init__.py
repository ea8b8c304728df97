# invoicing/models/__init__.py

from .invoice import Invoice
from .invoice_request import InvoiceRequest

__all__ = [
    "Invoice",
    "InvoiceRequest",
]
