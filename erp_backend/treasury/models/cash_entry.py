# treasury/models/cash_entry.py

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from treasury.routing import BOOK_METHOD_CHOICES, TREASURY_ACCOUNT_CHOICES


class CashEntry(models.Model):
    """
    One line of the treasury cash book.

    Rule:
    - Entries created by a receipt carry `receipt` and are locked:
      they cannot be edited or deleted independently of the receipt
    - Compensations never edit the original entry; they append an
      opposite-direction entry pointing at it through `reverses`
    """

    DIRECTION_INFLOW = "inflow"
    DIRECTION_OUTFLOW = "outflow"

    DIRECTION_CHOICES = [
        (DIRECTION_INFLOW, "Inflow"),
        (DIRECTION_OUTFLOW, "Outflow"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    date = models.DateTimeField(default=timezone.now)

    category = models.CharField(max_length=64)
    sub_category = models.CharField(max_length=64, blank=True, default="")

    payment_method = models.CharField(max_length=32, choices=BOOK_METHOD_CHOICES)

    direction = models.CharField(max_length=8, choices=DIRECTION_CHOICES)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    account = models.CharField(max_length=16, choices=TREASURY_ACCOUNT_CHOICES)

    check_number = models.CharField(max_length=32, blank=True, default="")
    counterparty = models.CharField(max_length=200, blank=True, default="")
    detail = models.CharField(max_length=255, blank=True, default="")
    comment = models.CharField(max_length=255, blank=True, default="")

    confirmed = models.BooleanField(default=True)

    receipt = models.ForeignKey(
        "receipts.Receipt",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="cash_entries",
        help_text="Receipt that produced this entry (locks it).",
    )

    reverses = models.OneToOneField(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversed_by",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        verbose_name = "Cash Entry"
        verbose_name_plural = "Cash Entries"
        indexes = [
            models.Index(fields=["date"], name="idx_cash_entry_date"),
            models.Index(fields=["account", "date"], name="idx_cash_entry_account_date"),
            models.Index(fields=["category"], name="idx_cash_entry_category"),
        ]

    def __str__(self):
        sign = "+" if self.direction == self.DIRECTION_INFLOW else "-"
        return f"{self.account} {sign}{self.amount} ({self.category})"

    @property
    def is_locked(self) -> bool:
        return self.receipt_id is not None

    @property
    def signed_amount(self) -> Decimal:
        if self.direction == self.DIRECTION_OUTFLOW:
            return -self.amount
        return self.amount

    def clean(self):
        if self.amount is None or self.amount <= 0:
            raise ValidationError("Cash entry amount must be > 0")

        if self.reverses_id and self.reverses.direction == self.direction:
            raise ValidationError("A compensating entry must have the opposite direction")

    def save(self, *args, **kwargs):
        # Block edits ONLY if already locked in DB
        if self.pk and not self._state.adding:
            if type(self).objects.filter(pk=self.pk, receipt__isnull=False).exists():
                raise ValidationError("Cash entries linked to a receipt are locked")

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.pk and type(self).objects.filter(pk=self.pk, receipt__isnull=False).exists():
            raise ValidationError("Cash entries linked to a receipt cannot be deleted")
        return super().delete(*args, **kwargs)
