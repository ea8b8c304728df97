# invoicing/admin.py

from django.contrib import admin

from invoicing.models import Invoice, InvoiceRequest


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("sale", "customer", "voucher_type", "status", "total", "date")
    list_filter = ("voucher_type", "status")
    search_fields = ("sale__number", "receiver_document_number", "receiver_name")


@admin.register(InvoiceRequest)
class InvoiceRequestAdmin(admin.ModelAdmin):
    list_display = ("receipt", "sale", "status", "attempts", "processed_at")
    list_filter = ("status",)
    readonly_fields = ("receipt", "sale", "attempts", "last_error", "invoice", "processed_at", "created_at")
