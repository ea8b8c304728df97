"""
======================================================
PATH: customers/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Customer + CustomerAccountEntry
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "document_type",
                    models.CharField(
                        choices=[("DNI", "DNI"), ("CUIT", "CUIT"), ("CUIL", "CUIL"), ("PASSPORT", "Passport")],
                        default="DNI",
                        max_length=16,
                    ),
                ),
                ("document_number", models.CharField(max_length=20, unique=True)),
                ("business_name", models.CharField(blank=True, default="", max_length=200)),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(blank=True, default="", max_length=100)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("address", models.CharField(blank=True, default="", max_length=255)),
                (
                    "vat_condition",
                    models.CharField(
                        choices=[
                            ("Responsable Inscripto", "Responsable Inscripto"),
                            ("Monotributista", "Monotributista"),
                            ("Exento", "Exento"),
                            ("Consumidor Final", "Consumidor Final"),
                        ],
                        default="Consumidor Final",
                        max_length=32,
                    ),
                ),
                (
                    "running_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Current account balance (positive = customer owes).",
                        max_digits=14,
                    ),
                ),
                ("credit_limit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("inactive", "Inactive"), ("delinquent", "Delinquent")],
                        default="active",
                        max_length=16,
                    ),
                ),
                (
                    "auto_invoicing",
                    models.BooleanField(
                        default=False,
                        help_text="Draft a tax invoice automatically once sales are collected.",
                    ),
                ),
                (
                    "requires_tax_invoice",
                    models.BooleanField(default=False, help_text="Customer must receive an AFIP tax invoice."),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["business_name", "last_name", "first_name"],
                "indexes": [models.Index(fields=["status"], name="idx_customer_status")],
            },
        ),
        migrations.CreateModel(
            name="CustomerAccountEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "entry_type",
                    models.CharField(
                        choices=[
                            ("sale", "Sale"),
                            ("receipt", "Receipt"),
                            ("receipt_reversal", "Receipt reversal"),
                            ("credit_note", "Credit note"),
                            ("debit_note", "Debit note"),
                            ("adjustment_charge", "Adjustment (charge)"),
                            ("adjustment_discount", "Adjustment (discount)"),
                        ],
                        max_length=24,
                    ),
                ),
                ("document_type", models.CharField(blank=True, default="", max_length=24)),
                ("document_number", models.CharField(blank=True, default="", max_length=32)),
                ("document_id", models.UUIDField(blank=True, null=True)),
                ("concept", models.CharField(blank=True, default="", max_length=255)),
                ("debit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("credit", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("balance", models.DecimalField(decimal_places=2, max_digits=14)),
                ("voided", models.BooleanField(default=False)),
                ("voided_at", models.DateTimeField(blank=True, null=True)),
                ("void_reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="customer_account_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="account_entries",
                        to="customers.customer",
                    ),
                ),
            ],
            options={
                "verbose_name": "Customer Account Entry",
                "verbose_name_plural": "Customer Account Entries",
                "ordering": ["date", "created_at"],
                "indexes": [
                    models.Index(fields=["customer", "date"], name="idx_account_entry_cust_date"),
                    models.Index(fields=["entry_type"], name="idx_account_entry_type"),
                    models.Index(fields=["document_id"], name="idx_account_entry_document"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("debit__gt", 0), ("credit", 0))
                        | models.Q(("debit", 0), ("credit__gt", 0)),
                        name="chk_account_entry_one_side",
                    )
                ],
            },
        ),
    ]
