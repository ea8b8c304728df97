# customers/models/customer.py

import uuid
from decimal import Decimal

from django.db import models


class Customer(models.Model):
    """
    Customer master record.

    running_balance:
    - Mirrors the balance of the customer's latest account entry.
    - Written ONLY by customers.services.account_ledger, under a row lock,
      in the same transaction as the entry that changes it.
    - Positive = the customer owes us.
    """

    DOC_DNI = "DNI"
    DOC_CUIT = "CUIT"
    DOC_CUIL = "CUIL"
    DOC_PASSPORT = "PASSPORT"

    DOCUMENT_TYPE_CHOICES = [
        (DOC_DNI, "DNI"),
        (DOC_CUIT, "CUIT"),
        (DOC_CUIL, "CUIL"),
        (DOC_PASSPORT, "Passport"),
    ]

    VAT_REGISTERED = "Responsable Inscripto"
    VAT_MONOTRIBUTO = "Monotributista"
    VAT_EXEMPT = "Exento"
    VAT_FINAL_CONSUMER = "Consumidor Final"

    VAT_CONDITION_CHOICES = [
        (VAT_REGISTERED, "Responsable Inscripto"),
        (VAT_MONOTRIBUTO, "Monotributista"),
        (VAT_EXEMPT, "Exento"),
        (VAT_FINAL_CONSUMER, "Consumidor Final"),
    ]

    STATUS_ACTIVE = "active"
    STATUS_INACTIVE = "inactive"
    STATUS_DELINQUENT = "delinquent"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
        (STATUS_DELINQUENT, "Delinquent"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    document_type = models.CharField(
        max_length=16, choices=DOCUMENT_TYPE_CHOICES, default=DOC_DNI
    )
    document_number = models.CharField(max_length=20, unique=True)

    business_name = models.CharField(max_length=200, blank=True, default="")
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100, blank=True, default="")

    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")

    vat_condition = models.CharField(
        max_length=32,
        choices=VAT_CONDITION_CHOICES,
        default=VAT_FINAL_CONSUMER,
    )

    running_balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Current account balance (positive = customer owes).",
    )
    credit_limit = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE
    )

    auto_invoicing = models.BooleanField(
        default=False,
        help_text="Draft a tax invoice automatically once sales are collected.",
    )
    requires_tax_invoice = models.BooleanField(
        default=False,
        help_text="Customer must receive an AFIP tax invoice.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["business_name", "last_name", "first_name"]
        indexes = [
            models.Index(fields=["status"], name="idx_customer_status"),
        ]

    @property
    def display_name(self) -> str:
        if self.business_name:
            return self.business_name
        return f"{self.last_name} {self.first_name}".strip()

    @property
    def can_buy_on_credit(self) -> bool:
        return self.status == self.STATUS_ACTIVE and self.running_balance < self.credit_limit

    def __str__(self):
        return f"{self.display_name} ({self.document_number})"
