"""
======================================================
PATH: treasury/migrations/0001_initial.py
======================================================
MIGRATION: CREATE CashEntry (treasury cash book)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("receipts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CashEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("date", models.DateTimeField(default=django.utils.timezone.now)),
                ("category", models.CharField(max_length=64)),
                ("sub_category", models.CharField(blank=True, default="", max_length=64)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("cash", "Cash"),
                            ("transfer", "Transfer"),
                            ("third_party_check", "Third-party check"),
                            ("debit_card", "Debit card"),
                            ("credit_card", "Credit card"),
                        ],
                        max_length=32,
                    ),
                ),
                (
                    "direction",
                    models.CharField(choices=[("inflow", "Inflow"), ("outflow", "Outflow")], max_length=8),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "account",
                    models.CharField(
                        choices=[
                            ("PROVINCIA", "Banco Provincia"),
                            ("SANTANDER", "Banco Santander"),
                            ("CASH", "Cash"),
                            ("FCI", "FCI"),
                            ("RESERVE", "Reserve"),
                        ],
                        max_length=16,
                    ),
                ),
                ("check_number", models.CharField(blank=True, default="", max_length=32)),
                ("counterparty", models.CharField(blank=True, default="", max_length=200)),
                ("detail", models.CharField(blank=True, default="", max_length=255)),
                ("comment", models.CharField(blank=True, default="", max_length=255)),
                ("confirmed", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "receipt",
                    models.ForeignKey(
                        blank=True,
                        help_text="Receipt that produced this entry (locks it).",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="cash_entries",
                        to="receipts.receipt",
                    ),
                ),
                (
                    "reverses",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reversed_by",
                        to="treasury.cashentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Cash Entry",
                "verbose_name_plural": "Cash Entries",
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["date"], name="idx_cash_entry_date"),
                    models.Index(fields=["account", "date"], name="idx_cash_entry_account_date"),
                    models.Index(fields=["category"], name="idx_cash_entry_category"),
                ],
            },
        ),
    ]
