"""
======================================================
PATH: receipts/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Receipt + ReceiptAllocation + ReceiptTender
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


ACCOUNT_CHOICES = [
    ("PROVINCIA", "Banco Provincia"),
    ("SANTANDER", "Banco Santander"),
    ("CASH", "Cash"),
    ("FCI", "FCI"),
    ("RESERVE", "Reserve"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        ("sales", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Receipt",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "number",
                    models.CharField(
                        blank=True,
                        help_text="REC-YYYYMM-NNNN, sequential per month",
                        max_length=32,
                        unique=True,
                    ),
                ),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("customer_name", models.CharField(blank=True, default="", max_length=200)),
                ("customer_document", models.CharField(blank=True, default="", max_length=20)),
                (
                    "mode",
                    models.CharField(
                        choices=[("regularization", "Debt regularization"), ("sale_collection", "Sale collection")],
                        max_length=20,
                    ),
                ),
                ("amount_due", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("amount_collected", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("change_given", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("amount_short", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "collection_timing",
                    models.CharField(
                        choices=[
                            ("advance", "Advance payment"),
                            ("on_delivery", "On delivery"),
                            ("deferred", "Deferred"),
                        ],
                        default="deferred",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(choices=[("active", "Active"), ("void", "Void")], default="active", max_length=8),
                ),
                ("observations", models.TextField(blank=True, default="")),
                ("void_reason", models.CharField(blank=True, default="", max_length=255)),
                ("voided_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="receipts_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="receipts",
                        to="customers.customer",
                    ),
                ),
                (
                    "modified_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="receipts_modified",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["customer", "date"], name="idx_receipt_customer_date"),
                    models.Index(fields=["status"], name="idx_receipt_status"),
                    models.Index(fields=["date"], name="idx_receipt_date"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReceiptAllocation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("sale_number", models.CharField(max_length=64)),
                ("original_sale_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("balance_before", models.DecimalField(decimal_places=2, max_digits=14)),
                ("amount_applied", models.DecimalField(decimal_places=2, max_digits=14)),
                ("balance_after", models.DecimalField(decimal_places=2, max_digits=14)),
                ("position", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "receipt",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="allocations",
                        to="receipts.receipt",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="receipt_allocations",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["receipt", "position"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount_applied__gt", 0))
                        & models.Q(("amount_applied__lte", models.F("balance_before"))),
                        name="chk_allocation_applied_within_balance",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("balance_after", models.F("balance_before") - models.F("amount_applied"))),
                        name="chk_allocation_balance_after",
                    ),
                    models.UniqueConstraint(fields=("receipt", "sale"), name="uniq_allocation_receipt_sale"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReceiptTender",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("cash", "Cash"),
                            ("transfer", "Bank transfer"),
                            ("check", "Check"),
                            ("debit_card", "Debit card"),
                            ("credit_card", "Credit card"),
                            ("account_credit", "Account credit"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("bank", models.CharField(blank=True, choices=ACCOUNT_CHOICES, default="", max_length=16)),
                (
                    "reference",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Transfer operation number / card authorization",
                        max_length=128,
                    ),
                ),
                ("check_number", models.CharField(blank=True, default="", max_length=32)),
                ("check_bank", models.CharField(blank=True, default="", max_length=100)),
                ("check_issue_date", models.DateField(blank=True, null=True)),
                ("check_due_date", models.DateField(blank=True, null=True)),
                ("check_holder", models.CharField(blank=True, default="", max_length=200)),
                ("check_holder_tax_id", models.CharField(blank=True, default="", max_length=20)),
                (
                    "check_status",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("pending", "Pending"),
                            ("in_portfolio", "In portfolio"),
                            ("deposited", "Deposited"),
                            ("cleared", "Cleared"),
                            ("rejected", "Rejected"),
                        ],
                        default="",
                        max_length=16,
                    ),
                ),
                ("observations", models.CharField(blank=True, default="", max_length=255)),
                ("position", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "receipt",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="tenders",
                        to="receipts.receipt",
                    ),
                ),
            ],
            options={
                "ordering": ["receipt", "position"],
                "indexes": [
                    models.Index(fields=["payment_method"], name="idx_tender_method"),
                    models.Index(fields=["check_status"], name="idx_tender_check_status"),
                ],
            },
        ),
    ]
