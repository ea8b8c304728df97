# customers/models/account_entry.py

"""
======================================================
PATH: customers/models/account_entry.py
======================================================
CUSTOMER ACCOUNT ENTRY (CURRENT ACCOUNT LEDGER)

Append-only record of a customer's running account balance.

Guarantees:
- Exactly one of debit / credit is positive
- balance = prior_balance - credit + debit
- Immutable once created; the only allowed change is the one-time
  voided=False -> voided=True transition
- Never deleted
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from customers.models.customer import Customer


class CustomerAccountEntry(models.Model):
    TYPE_SALE = "sale"
    TYPE_RECEIPT = "receipt"
    TYPE_RECEIPT_REVERSAL = "receipt_reversal"
    TYPE_CREDIT_NOTE = "credit_note"
    TYPE_DEBIT_NOTE = "debit_note"
    TYPE_ADJUSTMENT_CHARGE = "adjustment_charge"
    TYPE_ADJUSTMENT_DISCOUNT = "adjustment_discount"

    ENTRY_TYPES = [
        (TYPE_SALE, "Sale"),
        (TYPE_RECEIPT, "Receipt"),
        (TYPE_RECEIPT_REVERSAL, "Receipt reversal"),
        (TYPE_CREDIT_NOTE, "Credit note"),
        (TYPE_DEBIT_NOTE, "Debit note"),
        (TYPE_ADJUSTMENT_CHARGE, "Adjustment (charge)"),
        (TYPE_ADJUSTMENT_DISCOUNT, "Adjustment (discount)"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="account_entries",
    )

    date = models.DateTimeField(default=timezone.now)
    entry_type = models.CharField(max_length=24, choices=ENTRY_TYPES)

    document_type = models.CharField(max_length=24, blank=True, default="")
    document_number = models.CharField(max_length=32, blank=True, default="")
    document_id = models.UUIDField(null=True, blank=True)

    concept = models.CharField(max_length=255, blank=True, default="")

    debit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    balance = models.DecimalField(max_digits=14, decimal_places=2)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="customer_account_entries",
    )

    voided = models.BooleanField(default=False)
    voided_at = models.DateTimeField(null=True, blank=True)
    void_reason = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Customer Account Entry"
        verbose_name_plural = "Customer Account Entries"
        ordering = ["date", "created_at"]
        indexes = [
            models.Index(fields=["customer", "date"], name="idx_account_entry_cust_date"),
            models.Index(fields=["entry_type"], name="idx_account_entry_type"),
            models.Index(fields=["document_id"], name="idx_account_entry_document"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(Q(debit__gt=0, credit=0) | Q(debit=0, credit__gt=0)),
                name="chk_account_entry_one_side",
            ),
        ]

    def __str__(self):
        side = f"D {self.debit}" if self.debit > 0 else f"C {self.credit}"
        return f"{self.entry_type} {side} → {self.balance} ({self.customer_id})"

    def clean(self):
        debit = self.debit or Decimal("0.00")
        credit = self.credit or Decimal("0.00")

        if debit < 0 or credit < 0:
            raise ValidationError("debit and credit must be >= 0")
        if (debit > 0) == (credit > 0):
            raise ValidationError("Exactly one of debit / credit must be positive")

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            self._assert_only_void_transition()
            return super().save(*args, **kwargs)

        self.full_clean()
        return super().save(*args, **kwargs)

    def _assert_only_void_transition(self):
        original = type(self).objects.filter(pk=self.pk).first()
        if original is None:
            return

        if original.voided:
            raise ValidationError("Voided account entries are immutable")

        frozen = (
            "customer_id",
            "date",
            "entry_type",
            "document_type",
            "document_number",
            "document_id",
            "debit",
            "credit",
            "balance",
        )
        for field in frozen:
            if getattr(original, field) != getattr(self, field):
                raise ValidationError("Account entries are immutable; only voiding is allowed")

        if not self.voided:
            raise ValidationError("Account entries are immutable; only voiding is allowed")

    def delete(self, *args, **kwargs):
        raise ValidationError("Account entries are append-only and cannot be deleted")
