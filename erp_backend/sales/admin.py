# sales/admin.py

from django.contrib import admin
from sales.models.sale import Sale


# ======================================================
# SALE ADMIN
# ======================================================


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "number",
        "customer",
        "status",
        "collection_state",
        "total",
        "amount_collected",
        "balance_due",
        "date",
    )
    readonly_fields = (
        "number",
        "amount_collected",
        "balance_due",
        "collection_state",
        "last_collection_at",
        "receipts",
        "created_at",
        "updated_at",
    )
    search_fields = ("number", "customer__document_number", "customer__business_name")
    list_filter = ("status", "collection_state", "granular_state", "invoiced")
