# customers/apps.py

"""
CUSTOMERS APP CONFIG

Customer master data + the customer account ledger
(running balance of what each customer owes).
"""

from django.apps import AppConfig


class CustomersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "customers"
    verbose_name = "Customers & Accounts"
