# customers/api/views.py

"""
CUSTOMER ACCOUNT STATEMENT

GET /api/customers/<id>/account/?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD

Returns the customer summary (including running_balance) and the account
entries in chronological order. Requires customers.view_account.
"""

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from customers.api.serializers import (
    AccountEntrySerializer,
    AccountStatementQuerySerializer,
    CustomerSummarySerializer,
)
from customers.models import Customer
from customers.services.account_ledger import account_statement
from permissions.roles import CAP_CUSTOMERS_VIEW_ACCOUNT, HasCapability


class CustomerAccountStatementView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CUSTOMERS_VIEW_ACCOUNT

    @extend_schema(
        parameters=[AccountStatementQuerySerializer],
        responses={200: dict},
    )
    def get(self, request, customer_id):
        query = AccountStatementQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        customer = get_object_or_404(Customer, pk=customer_id)
        entries = account_statement(
            customer,
            date_from=query.validated_data.get("date_from"),
            date_to=query.validated_data.get("date_to"),
        )

        return Response(
            {
                "customer": CustomerSummarySerializer(customer).data,
                "entries": AccountEntrySerializer(entries, many=True).data,
            },
            status=status.HTTP_200_OK,
        )
