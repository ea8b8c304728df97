# invoicing/models/invoice_request.py

import uuid

from django.db import models


class InvoiceRequest(models.Model):
    """
    Outbox row: "draft an invoice for this sale".

    Written inside the receipt transaction, processed after commit.
    A failed request never touches the receipt that produced it.
    Voiding the receipt cancels its open requests.
    """

    STATUS_PENDING = "pending"
    STATUS_DONE = "done"
    STATUS_FAILED = "failed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_DONE, "Done"),
        (STATUS_FAILED, "Failed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    OPEN_STATUSES = (STATUS_PENDING, STATUS_FAILED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    receipt = models.ForeignKey(
        "receipts.Receipt",
        on_delete=models.PROTECT,
        related_name="invoice_requests",
    )
    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="invoice_requests",
    )

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True, default="")

    invoice = models.ForeignKey(
        "invoicing.Invoice",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="requests",
    )

    processed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="idx_invoice_req_status"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["receipt", "sale"],
                name="uniq_invoice_request_receipt_sale",
            ),
        ]

    def __str__(self):
        return f"{self.sale_id} | {self.status} (attempts={self.attempts})"
