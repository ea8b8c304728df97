# receipts/api/views.py

"""
======================================================
PATH: receipts/api/views.py
======================================================
RECEIPT VIEWSET (STAFF)

POST   /api/receipts/                 create (receipts.create)
GET    /api/receipts/                 list   (receipts.view)
GET    /api/receipts/<id>/            detail (receipts.view)
POST   /api/receipts/<id>/void/       void   (receipts.void)
PATCH  /api/receipts/<id>/void/       void   (receipts.void)
GET    /api/receipts/statistics/      totals (reports.view_collections)

Errors:
    {"error": {"code": "...", "message": "..."}}
    400 validation, 404 unknown customer / sale / receipt,
    500 unexpected (everything rolled back)
======================================================
"""

from __future__ import annotations

import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from permissions.roles import (
    CAP_RECEIPTS_CREATE,
    CAP_RECEIPTS_VIEW,
    CAP_RECEIPTS_VOID,
    CAP_REPORTS_VIEW_COLLECTIONS,
    HasCapability,
)
from receipts.api.errors import error_response, receipt_error_response
from receipts.api.filters import ReceiptFilter
from receipts.models import Receipt
from receipts.serializers import (
    ReceiptCreateSerializer,
    ReceiptSerializer,
    ReceiptVoidSerializer,
)
from receipts.services.exceptions import ReceiptError
from receipts.services.receipt_service import create_receipt
from receipts.services.reversal import void_receipt
from receipts.services.statistics import collection_statistics

logger = logging.getLogger("receipts")


class StatisticsQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    customer = serializers.UUIDField(required=False)


class ReceiptViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ReceiptSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = ReceiptFilter

    capability_by_action = {
        "list": CAP_RECEIPTS_VIEW,
        "retrieve": CAP_RECEIPTS_VIEW,
        "create": CAP_RECEIPTS_CREATE,
        "void": CAP_RECEIPTS_VOID,
        "statistics": CAP_REPORTS_VIEW_COLLECTIONS,
    }

    def get_permissions(self):
        self.required_capability = self.capability_by_action.get(self.action)
        return [IsAuthenticated(), HasCapability()]

    def get_queryset(self):
        return (
            Receipt.objects.all()
            .select_related("customer", "created_by", "modified_by")
            .prefetch_related("allocations", "tenders")
            .order_by("-date", "-created_at")
        )

    def _read(self, receipt_id) -> Receipt:
        return self.get_queryset().get(pk=receipt_id)

    # ======================================================
    # CREATE
    # ======================================================

    @extend_schema(
        request=ReceiptCreateSerializer,
        responses={201: ReceiptSerializer, 400: dict, 404: dict},
    )
    def create(self, request, *args, **kwargs):
        ser = ReceiptCreateSerializer(data=request.data)
        if not ser.is_valid():
            return error_response(
                "validation_error",
                "Invalid receipt payload.",
                status.HTTP_400_BAD_REQUEST,
                details=ser.errors,
            )

        data = ser.validated_data
        try:
            receipt = create_receipt(
                customer_id=data["customer_id"],
                sale_ids=data.get("sale_ids") or None,
                tenders=data.get("tenders") or [],
                collection_timing=data.get("collection_timing") or None,
                observations=data.get("observations") or "",
                creator=request.user,
            )
        except ReceiptError as exc:
            return receipt_error_response(exc)
        except Exception:
            logger.exception("Receipt creation failed", extra={"user_id": str(request.user.pk)})
            return error_response(
                "internal_error",
                "The receipt could not be created. No changes were saved.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(ReceiptSerializer(self._read(receipt.pk)).data, status=status.HTTP_201_CREATED)

    # ======================================================
    # VOID
    # ======================================================

    @extend_schema(
        request=ReceiptVoidSerializer,
        responses={200: ReceiptSerializer, 400: dict, 404: dict},
    )
    @action(detail=True, methods=["post", "patch"], url_path="void")
    def void(self, request, pk=None):
        ser = ReceiptVoidSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            receipt = void_receipt(
                receipt_id=pk,
                void_reason=ser.validated_data.get("void_reason") or "",
                modifier=request.user,
            )
        except ReceiptError as exc:
            return receipt_error_response(exc)
        except Exception:
            logger.exception("Receipt void failed", extra={"receipt_id": str(pk)})
            return error_response(
                "internal_error",
                "The receipt could not be voided. No changes were saved.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response(ReceiptSerializer(self._read(receipt.pk)).data, status=status.HTTP_200_OK)

    # ======================================================
    # STATISTICS
    # ======================================================

    @extend_schema(
        parameters=[StatisticsQuerySerializer],
        responses={200: serializers.DictField()},
    )
    @action(detail=False, methods=["get"], url_path="statistics")
    def statistics(self, request):
        ser = StatisticsQuerySerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)

        stats = collection_statistics(
            date_from=ser.validated_data.get("date_from"),
            date_to=ser.validated_data.get("date_to"),
            customer_id=ser.validated_data.get("customer"),
        )
        return Response(stats, status=status.HTTP_200_OK)
