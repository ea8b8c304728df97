# receipts/serializers/receipt_command.py

"""
Input shapes for the receipt endpoints.

Structural parsing only. Business rules (known methods, amounts > 0,
sale ownership, ...) are enforced by receipts.services.validation so the
same rules apply to every caller.
"""

from rest_framework import serializers


class CheckInputSerializer(serializers.Serializer):
    number = serializers.CharField(max_length=32)
    bank = serializers.CharField(max_length=100)
    issue_date = serializers.DateField()
    due_date = serializers.DateField()
    holder = serializers.CharField(max_length=200)
    holder_tax_id = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    status = serializers.CharField(max_length=16, required=False, allow_blank=True, default="")


class TenderInputSerializer(serializers.Serializer):
    payment_method = serializers.CharField(max_length=20)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    bank = serializers.CharField(max_length=16, required=False, allow_blank=True, default="")
    reference = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    check = CheckInputSerializer(required=False, allow_null=True, default=None)
    observations = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class ReceiptCreateSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    sale_ids = serializers.ListField(
        child=serializers.UUIDField(),
        required=False,
        allow_empty=True,
        default=list,
    )
    tenders = TenderInputSerializer(many=True, allow_empty=True)
    collection_timing = serializers.CharField(max_length=16, required=False, allow_blank=True, default="")
    observations = serializers.CharField(required=False, allow_blank=True, default="")


class ReceiptVoidSerializer(serializers.Serializer):
    void_reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
