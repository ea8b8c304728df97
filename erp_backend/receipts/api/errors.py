# receipts/api/errors.py

from rest_framework import status
from rest_framework.response import Response

from receipts.services.exceptions import ReceiptError, ReceiptNotFoundError


def error_response(code: str, message: str, http_status: int, details=None) -> Response:
    body = {"error": {"code": code, "message": message}}
    if details is not None:
        body["error"]["details"] = details
    return Response(body, status=http_status)


def receipt_error_response(exc: ReceiptError) -> Response:
    http_status = (
        status.HTTP_404_NOT_FOUND
        if isinstance(exc, ReceiptNotFoundError)
        else status.HTTP_400_BAD_REQUEST
    )
    return error_response(exc.code, str(exc), http_status)
