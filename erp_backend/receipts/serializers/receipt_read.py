# receipts/serializers/receipt_read.py

from rest_framework import serializers

from receipts.models import Receipt, ReceiptAllocation, ReceiptTender


class ReceiptAllocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReceiptAllocation
        fields = [
            "id",
            "sale",
            "sale_number",
            "original_sale_amount",
            "balance_before",
            "amount_applied",
            "balance_after",
            "position",
        ]
        read_only_fields = fields


class ReceiptTenderSerializer(serializers.ModelSerializer):
    check = serializers.SerializerMethodField()

    class Meta:
        model = ReceiptTender
        fields = [
            "id",
            "payment_method",
            "amount",
            "bank",
            "reference",
            "check",
            "observations",
            "position",
        ]
        read_only_fields = fields

    def get_check(self, obj):
        if not obj.has_check:
            return None
        return {
            "number": obj.check_number,
            "bank": obj.check_bank,
            "issue_date": obj.check_issue_date,
            "due_date": obj.check_due_date,
            "holder": obj.check_holder,
            "holder_tax_id": obj.check_holder_tax_id,
            "status": obj.check_status,
        }


class ReceiptSerializer(serializers.ModelSerializer):
    """
    Receipt with allocations, tenders and totals (read-only).
    """

    allocations = ReceiptAllocationSerializer(many=True, read_only=True)
    tenders = ReceiptTenderSerializer(many=True, read_only=True)
    totals = serializers.SerializerMethodField()
    created_by = serializers.SerializerMethodField()
    modified_by = serializers.SerializerMethodField()

    class Meta:
        model = Receipt
        fields = [
            "id",
            "number",
            "date",
            "customer",
            "customer_name",
            "customer_document",
            "mode",
            "collection_timing",
            "status",
            "observations",
            "allocations",
            "tenders",
            "totals",
            "created_by",
            "modified_by",
            "void_reason",
            "voided_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_totals(self, obj):
        return {
            "amount_due": str(obj.amount_due),
            "amount_collected": str(obj.amount_collected),
            "change_given": str(obj.change_given),
            "amount_short": str(obj.amount_short),
        }

    def _user_label(self, user):
        if user is None:
            return None
        return getattr(user, "username", None) or getattr(user, "email", None)

    def get_created_by(self, obj):
        return self._user_label(obj.created_by)

    def get_modified_by(self, obj):
        return self._user_label(obj.modified_by)
