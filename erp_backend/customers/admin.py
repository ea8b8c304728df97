# customers/admin.py

from django.contrib import admin

from customers.models import Customer, CustomerAccountEntry


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = (
        "document_number",
        "business_name",
        "last_name",
        "first_name",
        "vat_condition",
        "status",
        "running_balance",
    )
    # written only by the account ledger service
    readonly_fields = ("running_balance", "created_at", "updated_at")
    search_fields = ("document_number", "business_name", "last_name", "first_name")
    list_filter = ("status", "vat_condition", "auto_invoicing")


@admin.register(CustomerAccountEntry)
class CustomerAccountEntryAdmin(admin.ModelAdmin):
    list_display = ("customer", "date", "entry_type", "document_number", "debit", "credit", "balance", "voided")
    list_filter = ("entry_type", "voided")
    search_fields = ("document_number", "customer__document_number")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
