# treasury/admin.py

from django.contrib import admin

from treasury.models import CashEntry


@admin.register(CashEntry)
class CashEntryAdmin(admin.ModelAdmin):
    list_display = ("date", "category", "payment_method", "direction", "amount", "account", "receipt")
    list_filter = ("direction", "account", "payment_method", "category")
    search_fields = ("detail", "counterparty", "check_number", "receipt__number")
    readonly_fields = ("receipt", "reverses", "created_at")

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.is_locked:
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_locked:
            return False
        return super().has_delete_permission(request, obj)
