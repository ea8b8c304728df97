# customers/api/serializers.py

from rest_framework import serializers

from customers.models import Customer, CustomerAccountEntry


class CustomerSummarySerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = Customer
        fields = [
            "id",
            "display_name",
            "document_type",
            "document_number",
            "vat_condition",
            "status",
            "running_balance",
            "credit_limit",
        ]
        read_only_fields = fields


class AccountEntrySerializer(serializers.ModelSerializer):
    created_by = serializers.SerializerMethodField()

    class Meta:
        model = CustomerAccountEntry
        fields = [
            "id",
            "date",
            "entry_type",
            "document_type",
            "document_number",
            "document_id",
            "concept",
            "debit",
            "credit",
            "balance",
            "voided",
            "created_by",
        ]
        read_only_fields = fields

    def get_created_by(self, obj):
        user = obj.created_by
        return getattr(user, "email", None) if user else None


class AccountStatementQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        date_from = attrs.get("date_from")
        date_to = attrs.get("date_to")
        if date_from and date_to and date_to < date_from:
            raise serializers.ValidationError("date_to cannot be before date_from")
        return attrs
