# receipts/api/filters.py

import django_filters

from receipts.models import Receipt
from treasury.routing import PAYMENT_METHOD_CHOICES


class ReceiptFilter(django_filters.FilterSet):
    customer = django_filters.UUIDFilter(field_name="customer_id")
    status = django_filters.ChoiceFilter(choices=Receipt.STATUS_CHOICES)
    mode = django_filters.ChoiceFilter(choices=Receipt.MODE_CHOICES)
    collection_timing = django_filters.ChoiceFilter(choices=Receipt.TIMING_CHOICES)
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="date__lte")
    payment_method = django_filters.ChoiceFilter(
        field_name="tenders__payment_method",
        choices=PAYMENT_METHOD_CHOICES,
        distinct=True,
    )
    number = django_filters.CharFilter(field_name="number", lookup_expr="icontains")

    class Meta:
        model = Receipt
        fields = [
            "customer",
            "status",
            "mode",
            "collection_timing",
            "date_from",
            "date_to",
            "payment_method",
            "number",
        ]
