"""
======================================================
PATH: sales/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Sale (account sales + collection state)

The Sale <-> Receipt M2M is added in 0002, after receipts.0001,
since receipts.0001 references sales.Sale.
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
        ("customers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "number",
                    models.CharField(
                        blank=True,
                        help_text="System-generated sale number",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("amount_collected", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("balance_due", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                (
                    "collection_state",
                    models.CharField(
                        choices=[("unpaid", "Unpaid"), ("partial", "Partially collected"), ("settled", "Settled")],
                        default="unpaid",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("cancelled", "Cancelled")],
                        default="pending",
                        max_length=16,
                    ),
                ),
                (
                    "granular_state",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("invoiced", "Invoiced"),
                            ("delivered", "Delivered"),
                            ("collected", "Collected"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("requires_tax_invoice", models.BooleanField(default=False)),
                ("invoiced", models.BooleanField(default=False)),
                ("last_collection_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to="customers.customer",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="Staff member who registered the sale",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["customer", "collection_state"], name="idx_sale_cust_collection"),
                    models.Index(fields=["status"], name="idx_sale_status"),
                    models.Index(fields=["date"], name="idx_sale_date"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount_collected__gte", 0))
                        & models.Q(("amount_collected__lte", models.F("total"))),
                        name="chk_sale_collected_within_total",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("balance_due__gte", 0)),
                        name="chk_sale_balance_non_negative",
                    ),
                ],
            },
        ),
    ]
