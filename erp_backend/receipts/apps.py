# receipts/apps.py

"""
RECEIPTS APP CONFIG

Accounts-receivable settlement: receipts, their allocations across
sales, tenders, and the void (reversal) flow.
"""

from django.apps import AppConfig


class ReceiptsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "receipts"
    verbose_name = "Receipts"
