# invoicing/services/exceptions.py

"""
INVOICING SERVICE ERRORS
"""


class InvoicingError(Exception):
    """Base exception for invoicing failures (never fatal to a receipt)."""


class SaleAlreadyInvoicedError(InvoicingError):
    """Raised when a draft is requested for a sale that already has one."""


class InvoiceNotAllowedError(InvoicingError):
    """Raised when the sale cannot be invoiced (cancelled, zero total, ...)."""
