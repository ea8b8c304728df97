# invoicing/apps.py

"""
INVOICING APP CONFIG

Draft tax invoices + the invoicing outbox fed by collected sales.
"""

from django.apps import AppConfig


class InvoicingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "invoicing"
    verbose_name = "Invoicing"
