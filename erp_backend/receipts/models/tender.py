# receipts/models/tender.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from treasury.routing import PAYMENT_METHOD_CHOICES, TREASURY_ACCOUNT_CHOICES


class ReceiptTender(models.Model):
    """
    One payment line of a receipt (amount + method).

    RULES:
    - amount > 0
    - payment_method comes from the closed routing table
    - Write-once, like the receipt itself
    """

    CHECK_PENDING = "pending"
    CHECK_IN_PORTFOLIO = "in_portfolio"
    CHECK_DEPOSITED = "deposited"
    CHECK_CLEARED = "cleared"
    CHECK_REJECTED = "rejected"

    CHECK_STATUS_CHOICES = [
        (CHECK_PENDING, "Pending"),
        (CHECK_IN_PORTFOLIO, "In portfolio"),
        (CHECK_DEPOSITED, "Deposited"),
        (CHECK_CLEARED, "Cleared"),
        (CHECK_REJECTED, "Rejected"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    receipt = models.ForeignKey(
        "receipts.Receipt",
        on_delete=models.PROTECT,
        related_name="tenders",
    )

    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    bank = models.CharField(
        max_length=16,
        choices=TREASURY_ACCOUNT_CHOICES,
        blank=True,
        default="",
    )
    reference = models.CharField(
        max_length=128,
        blank=True,
        default="",
        help_text="Transfer operation number / card authorization",
    )

    # check details
    check_number = models.CharField(max_length=32, blank=True, default="")
    check_bank = models.CharField(max_length=100, blank=True, default="")
    check_issue_date = models.DateField(null=True, blank=True)
    check_due_date = models.DateField(null=True, blank=True)
    check_holder = models.CharField(max_length=200, blank=True, default="")
    check_holder_tax_id = models.CharField(max_length=20, blank=True, default="")
    check_status = models.CharField(
        max_length=16,
        choices=CHECK_STATUS_CHOICES,
        blank=True,
        default="",
    )

    observations = models.CharField(max_length=255, blank=True, default="")

    position = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["receipt", "position"]
        indexes = [
            models.Index(fields=["payment_method"], name="idx_tender_method"),
            models.Index(fields=["check_status"], name="idx_tender_check_status"),
        ]

    def clean(self):
        if self.amount is None or self.amount <= 0:
            raise ValidationError("Tender amount must be > 0")
        if self.check_due_date and self.check_issue_date and self.check_due_date < self.check_issue_date:
            raise ValidationError("Check due date cannot be before its issue date")

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            # only the check portfolio status may move after creation
            previous = ReceiptTender.objects.filter(pk=self.pk).first()
            if previous is not None:
                for field in ("receipt_id", "payment_method", "amount", "bank", "check_number"):
                    if getattr(previous, field) != getattr(self, field):
                        raise ValidationError("Receipt tenders are immutable")
        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def has_check(self) -> bool:
        return bool(self.check_number)

    def __str__(self):
        return f"{self.payment_method} | {self.amount}"
