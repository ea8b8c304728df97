# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    A sale on the customer's current account.

    GUARANTEES:
    - amount_collected never exceeds total
    - balance_due is always total - amount_collected (recomputed on save)
    - total / customer / number are immutable once the sale is confirmed

    COLLECTION:
    - amount_collected / balance_due / collection_state are mutated ONLY by
      the receipts services (allocation + void)
    - receipts (M2M) lists every active receipt that applied money here
    """

    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    STATUS_ENUM = {
        STATUS_PENDING: {"label": "Pending", "terminal": False, "collectible": True},
        STATUS_CONFIRMED: {"label": "Confirmed", "terminal": False, "collectible": True},
        STATUS_CANCELLED: {"label": "Cancelled", "terminal": True, "collectible": False},
    }

    COLLECTION_UNPAID = "unpaid"
    COLLECTION_PARTIAL = "partial"
    COLLECTION_SETTLED = "settled"

    COLLECTION_CHOICES = [
        (COLLECTION_UNPAID, "Unpaid"),
        (COLLECTION_PARTIAL, "Partially collected"),
        (COLLECTION_SETTLED, "Settled"),
    ]

    GRANULAR_DRAFT = "draft"
    GRANULAR_PENDING = "pending"
    GRANULAR_CONFIRMED = "confirmed"
    GRANULAR_INVOICED = "invoiced"
    GRANULAR_DELIVERED = "delivered"
    GRANULAR_COLLECTED = "collected"
    GRANULAR_COMPLETED = "completed"
    GRANULAR_CANCELLED = "cancelled"

    GRANULAR_CHOICES = [
        (GRANULAR_DRAFT, "Draft"),
        (GRANULAR_PENDING, "Pending"),
        (GRANULAR_CONFIRMED, "Confirmed"),
        (GRANULAR_INVOICED, "Invoiced"),
        (GRANULAR_DELIVERED, "Delivered"),
        (GRANULAR_COLLECTED, "Collected"),
        (GRANULAR_COMPLETED, "Completed"),
        (GRANULAR_CANCELLED, "Cancelled"),
    ]

    @classmethod
    def get_status_enum(cls):
        return cls.STATUS_ENUM

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated sale number",
    )

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="sales",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Staff member who registered the sale",
    )

    date = models.DateTimeField(default=timezone.now)

    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    amount_collected = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    balance_due = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    collection_state = models.CharField(
        max_length=16,
        choices=COLLECTION_CHOICES,
        default=COLLECTION_UNPAID,
    )

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    granular_state = models.CharField(
        max_length=16,
        choices=GRANULAR_CHOICES,
        default=GRANULAR_PENDING,
    )

    requires_tax_invoice = models.BooleanField(default=False)
    invoiced = models.BooleanField(default=False)

    receipts = models.ManyToManyField(
        "receipts.Receipt",
        related_name="collected_sales",
        blank=True,
        help_text="Active receipts that applied money to this sale",
    )

    last_collection_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["customer", "collection_state"], name="idx_sale_cust_collection"),
            models.Index(fields=["status"], name="idx_sale_status"),
            models.Index(fields=["date"], name="idx_sale_date"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_collected__gte=0) & Q(amount_collected__lte=F("total")),
                name="chk_sale_collected_within_total",
            ),
            models.CheckConstraint(
                condition=Q(balance_due__gte=0),
                name="chk_sale_balance_non_negative",
            ),
        ]

    _IMMUTABLE_FIELDS_AFTER_CONFIRM = (
        "customer_id",
        "total",
        "number",
    )

    def _validate_immutable(self, previous: "Sale"):
        if previous.status != self.STATUS_CONFIRMED:
            return

        for field in self._IMMUTABLE_FIELDS_AFTER_CONFIRM:
            if getattr(self, field) != getattr(previous, field):
                raise ValidationError(
                    f"Sale is immutable once confirmed. Field '{field}' cannot be changed."
                )

    def clean(self):
        if self.total is not None and self.total < 0:
            raise ValidationError("Sale total must be >= 0")
        if self.amount_collected is not None and self.total is not None:
            if self.amount_collected < 0:
                raise ValidationError("amount_collected must be >= 0")
            if self.amount_collected > self.total:
                raise ValidationError("amount_collected cannot exceed the sale total")

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.number:
            prefix = timezone.now().strftime("VTA%Y%m%d")
            self.number = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

        self.total = Decimal(self.total or "0.00")
        self.amount_collected = Decimal(self.amount_collected or "0.00")
        self.balance_due = self.total - self.amount_collected

        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "amount_collected" in update_fields:
            kwargs["update_fields"] = set(update_fields) | {"balance_due"}

        super().save(*args, **kwargs)

    @property
    def is_collectible(self) -> bool:
        return self.STATUS_ENUM.get(self.status, {}).get("collectible", False)

    def __str__(self):
        return f"{self.number} | {self.total}"
