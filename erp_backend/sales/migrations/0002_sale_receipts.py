"""
======================================================
PATH: sales/migrations/0002_sale_receipts.py
======================================================
MIGRATION: ADD Sale.receipts (M2M -> receipts.Receipt)
"""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("sales", "0001_initial"),
        ("receipts", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="sale",
            name="receipts",
            field=models.ManyToManyField(
                blank=True,
                help_text="Active receipts that applied money to this sale",
                related_name="collected_sales",
                to="receipts.receipt",
            ),
        ),
    ]
