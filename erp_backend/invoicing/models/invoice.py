# invoicing/models/invoice.py

import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone


class Invoice(models.Model):
    """
    Draft tax invoice for one sale.

    Drafts carry no fiscal number; authorization against the tax
    authority happens elsewhere.
    """

    VOUCHER_A = "A"
    VOUCHER_B = "B"
    VOUCHER_C = "C"

    VOUCHER_CHOICES = [
        (VOUCHER_A, "Factura A"),
        (VOUCHER_B, "Factura B"),
        (VOUCHER_C, "Factura C"),
    ]

    STATUS_DRAFT = "draft"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="invoices",
    )

    voucher_type = models.CharField(max_length=1, choices=VOUCHER_CHOICES)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_DRAFT)

    issuer_vat_condition = models.CharField(max_length=32)

    receiver_document_type = models.CharField(max_length=16, blank=True, default="")
    receiver_document_number = models.CharField(max_length=20, blank=True, default="")
    receiver_name = models.CharField(max_length=200, blank=True, default="")
    receiver_vat_condition = models.CharField(max_length=32, blank=True, default="")

    date = models.DateTimeField(default=timezone.now)

    net_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    vat_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    created_by_username = models.CharField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["sale"], name="idx_invoice_sale"),
            models.Index(fields=["status"], name="idx_invoice_status"),
        ]

    def __str__(self):
        return f"Draft {self.voucher_type} | {self.total} ({self.sale_id})"
