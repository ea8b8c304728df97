# receipts/admin.py

from django.contrib import admin

from receipts.models import Receipt, ReceiptAllocation, ReceiptTender


class ReceiptAllocationInline(admin.TabularInline):
    model = ReceiptAllocation
    extra = 0
    can_delete = False
    readonly_fields = (
        "sale",
        "sale_number",
        "original_sale_amount",
        "balance_before",
        "amount_applied",
        "balance_after",
        "position",
    )

    def has_add_permission(self, request, obj=None):
        return False


class ReceiptTenderInline(admin.TabularInline):
    model = ReceiptTender
    extra = 0
    can_delete = False
    readonly_fields = (
        "payment_method",
        "amount",
        "bank",
        "reference",
        "check_number",
        "check_bank",
        "check_due_date",
        "check_status",
        "position",
    )
    fields = readonly_fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    """
    Read-only: receipts are created and voided through the API only.
    """

    list_display = ("number", "date", "customer_name", "mode", "amount_collected", "status")
    list_filter = ("status", "mode", "collection_timing")
    search_fields = ("number", "customer_name", "customer_document")
    inlines = [ReceiptAllocationInline, ReceiptTenderInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
