# PATH: invoicing/services/draft_invoice.py

"""
DRAFT INVOICE SERVICE

Responsibilities:
- Pick the voucher type (A / B / C) from issuer and receiver VAT conditions
- Create a draft Invoice for one sale
- Link it back: sale.invoiced = True

Voucher rules:
- Issuer not "Responsable Inscripto"       -> C
- Issuer RI, receiver RI                   -> A
- Issuer RI, any other receiver            -> B
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction

from invoicing.models import Invoice
from invoicing.services.exceptions import InvoiceNotAllowedError, SaleAlreadyInvoicedError
from sales.models import Sale

TWOPLACES = Decimal("0.01")
VAT_RATE = Decimal("0.21")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _norm(condition: str) -> str:
    return "_".join((condition or "").upper().split())


def _is_registered(condition: str) -> bool:
    return _norm(condition) in ("RESPONSABLE_INSCRIPTO", "RESPONSABLE_INSCRITO")


def determine_voucher_type(*, issuer_vat_condition: str, receiver_vat_condition: str) -> str:
    if not _is_registered(issuer_vat_condition):
        return Invoice.VOUCHER_C
    if _is_registered(receiver_vat_condition):
        return Invoice.VOUCHER_A
    return Invoice.VOUCHER_B


def _split_vat(total: Decimal, voucher_type: str) -> tuple[Decimal, Decimal]:
    # only A vouchers discriminate VAT
    if voucher_type != Invoice.VOUCHER_A:
        return total, Decimal("0.00")
    net = _money(total / (Decimal("1") + VAT_RATE))
    return net, total - net


@transaction.atomic
def create_draft_invoice_for_sale(*, sale_id, username: str = "system") -> Invoice:
    sale = Sale.objects.select_for_update().select_related("customer").get(pk=sale_id)

    if sale.invoiced:
        raise SaleAlreadyInvoicedError(f"Sale {sale.number} is already invoiced")
    if sale.status == Sale.STATUS_CANCELLED:
        raise InvoiceNotAllowedError(f"Sale {sale.number} is cancelled")
    if sale.total <= 0:
        raise InvoiceNotAllowedError(f"Sale {sale.number} has no amount to invoice")

    customer = sale.customer
    issuer_condition = getattr(settings, "COMPANY_VAT_CONDITION", "Responsable Inscripto")
    voucher_type = determine_voucher_type(
        issuer_vat_condition=issuer_condition,
        receiver_vat_condition=customer.vat_condition,
    )

    total = _money(sale.total)
    net, vat = _split_vat(total, voucher_type)

    invoice = Invoice.objects.create(
        sale=sale,
        customer=customer,
        voucher_type=voucher_type,
        issuer_vat_condition=issuer_condition,
        receiver_document_type=customer.document_type,
        receiver_document_number=customer.document_number,
        receiver_name=customer.display_name,
        receiver_vat_condition=customer.vat_condition,
        date=sale.date,
        net_amount=net,
        vat_amount=vat,
        total=total,
        created_by_username=username or "system",
    )

    sale.invoiced = True
    sale.save(update_fields=["invoiced", "updated_at"])

    return invoice
