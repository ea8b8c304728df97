# receipts/models/receipt.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Receipt(models.Model):
    """
    Money collected from a customer in one transaction.

    GUARANTEES:
    - Created once, together with its allocations, tenders and the
      ledger / cash side effects (single atomic block)
    - Immutable afterwards, except the single terminal transition
      active -> void (receipts.services.reversal)
    """

    MODE_REGULARIZATION = "regularization"
    MODE_SALE_COLLECTION = "sale_collection"

    MODE_CHOICES = [
        (MODE_REGULARIZATION, "Debt regularization"),
        (MODE_SALE_COLLECTION, "Sale collection"),
    ]

    STATUS_ACTIVE = "active"
    STATUS_VOID = "void"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_VOID, "Void"),
    ]

    TIMING_ADVANCE = "advance"
    TIMING_ON_DELIVERY = "on_delivery"
    TIMING_DEFERRED = "deferred"

    TIMING_CHOICES = [
        (TIMING_ADVANCE, "Advance payment"),
        (TIMING_ON_DELIVERY, "On delivery"),
        (TIMING_DEFERRED, "Deferred"),
    ]

    REGULARIZATION_OBSERVATIONS = "Debt regularization - direct payment"

    NUMBER_PREFIX = "REC"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    number = models.CharField(
        max_length=32,
        unique=True,
        blank=True,
        help_text="REC-YYYYMM-NNNN, sequential per month",
    )

    date = models.DateTimeField(default=timezone.now)

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="receipts",
    )
    customer_name = models.CharField(max_length=200, blank=True, default="")
    customer_document = models.CharField(max_length=20, blank=True, default="")

    mode = models.CharField(max_length=20, choices=MODE_CHOICES)

    amount_due = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    amount_collected = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    change_given = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    amount_short = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    collection_timing = models.CharField(
        max_length=16,
        choices=TIMING_CHOICES,
        default=TIMING_DEFERRED,
    )

    status = models.CharField(max_length=8, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    observations = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="receipts_created",
    )
    modified_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="receipts_modified",
    )

    void_reason = models.CharField(max_length=255, blank=True, default="")
    voided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["customer", "date"], name="idx_receipt_customer_date"),
            models.Index(fields=["status"], name="idx_receipt_status"),
            models.Index(fields=["date"], name="idx_receipt_date"),
        ]

    _IMMUTABLE_FIELDS = (
        "number",
        "date",
        "customer_id",
        "mode",
        "amount_due",
        "amount_collected",
        "change_given",
        "amount_short",
        "collection_timing",
        "created_by_id",
    )

    @classmethod
    def next_number(cls, when=None) -> str:
        when = timezone.localtime(when or timezone.now())
        prefix = f"{cls.NUMBER_PREFIX}-{when:%Y%m}-"

        last = (
            cls.objects.filter(number__startswith=prefix)
            .order_by("-number")
            .values_list("number", flat=True)
            .first()
        )
        seq = int(last.rsplit("-", 1)[-1]) + 1 if last else 1
        return f"{prefix}{seq:04d}"

    def _validate_immutable(self, previous: "Receipt"):
        if previous.status == self.STATUS_VOID:
            raise ValidationError("Void receipts are immutable")

        if self.status not in (self.STATUS_ACTIVE, self.STATUS_VOID):
            raise ValidationError(f"Invalid receipt status: {self.status}")

        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValidationError(
                    f"Receipts are immutable. Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Receipt.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.number:
            self.number = self.next_number(self.date)

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Receipts cannot be deleted; void them instead")

    @property
    def is_void(self) -> bool:
        return self.status == self.STATUS_VOID

    def __str__(self):
        return f"{self.number} | {self.amount_collected} ({self.status})"
