"""
======================================================
PATH: invoicing/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Invoice (drafts) + InvoiceRequest (outbox)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        ("sales", "0001_initial"),
        ("receipts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "voucher_type",
                    models.CharField(
                        choices=[("A", "Factura A"), ("B", "Factura B"), ("C", "Factura C")],
                        max_length=1,
                    ),
                ),
                ("status", models.CharField(choices=[("draft", "Draft")], default="draft", max_length=16)),
                ("issuer_vat_condition", models.CharField(max_length=32)),
                ("receiver_document_type", models.CharField(blank=True, default="", max_length=16)),
                ("receiver_document_number", models.CharField(blank=True, default="", max_length=20)),
                ("receiver_name", models.CharField(blank=True, default="", max_length=200)),
                ("receiver_vat_condition", models.CharField(blank=True, default="", max_length=32)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("net_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("vat_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("created_by_username", models.CharField(blank=True, default="", max_length=150)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="customers.customer",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoices",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["sale"], name="idx_invoice_sale"),
                    models.Index(fields=["status"], name="idx_invoice_status"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InvoiceRequest",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("done", "Done"), ("failed", "Failed")],
                        default="pending",
                        max_length=8,
                    ),
                ),
                ("attempts", models.PositiveIntegerField(default=0)),
                ("last_error", models.TextField(blank=True, default="")),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "invoice",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="requests",
                        to="invoicing.invoice",
                    ),
                ),
                (
                    "receipt",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoice_requests",
                        to="receipts.receipt",
                    ),
                ),
                (
                    "sale",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="invoice_requests",
                        to="sales.sale",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [models.Index(fields=["status", "created_at"], name="idx_invoice_req_status")],
                "constraints": [
                    models.UniqueConstraint(fields=("receipt", "sale"), name="uniq_invoice_request_receipt_sale"),
                ],
            },
        ),
    ]
