# receipts/models/allocation.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q


class ReceiptAllocation(models.Model):
    """
    Portion of a receipt applied to one specific sale.

    RULES:
    - 0 < amount_applied <= balance_before
    - balance_after = balance_before - amount_applied
    - Write-once: created with the receipt, never edited.
      A void leaves allocations in place as the audit trail.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    receipt = models.ForeignKey(
        "receipts.Receipt",
        on_delete=models.PROTECT,
        related_name="allocations",
    )

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="receipt_allocations",
    )

    sale_number = models.CharField(max_length=64)
    original_sale_amount = models.DecimalField(max_digits=14, decimal_places=2)
    balance_before = models.DecimalField(max_digits=14, decimal_places=2)
    amount_applied = models.DecimalField(max_digits=14, decimal_places=2)
    balance_after = models.DecimalField(max_digits=14, decimal_places=2)

    position = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["receipt", "position"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_applied__gt=0) & Q(amount_applied__lte=F("balance_before")),
                name="chk_allocation_applied_within_balance",
            ),
            models.CheckConstraint(
                condition=Q(balance_after=F("balance_before") - F("amount_applied")),
                name="chk_allocation_balance_after",
            ),
            models.UniqueConstraint(
                fields=["receipt", "sale"],
                name="uniq_allocation_receipt_sale",
            ),
        ]

    def clean(self):
        applied = Decimal(self.amount_applied or "0.00")
        before = Decimal(self.balance_before or "0.00")
        after = Decimal(self.balance_after or "0.00")

        if applied <= 0:
            raise ValidationError("amount_applied must be > 0")
        if applied > before:
            raise ValidationError("amount_applied cannot exceed balance_before")
        if after != before - applied:
            raise ValidationError("balance_after must equal balance_before - amount_applied")

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            raise ValidationError("Receipt allocations are immutable")
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.sale_number} | {self.amount_applied}"
