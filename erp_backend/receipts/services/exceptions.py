# receipts/services/exceptions.py

"""
RECEIPTS SERVICE ERRORS

Centralized domain errors for the settlement engine.
Raised before anything commits; the surrounding atomic block rolls back.
"""


class ReceiptError(Exception):
    """Base exception for all receipt service failures."""

    code = "receipt_error"


class ReceiptValidationError(ReceiptError):
    """Raised when a request breaks a structural or business rule."""

    code = "validation_error"


class ReceiptNotFoundError(ReceiptError):
    """Raised when a referenced customer, sale or receipt does not exist."""

    code = "not_found"
