# backend/urls.py
"""
PROJECT URLS

All API routes live under /api/

Modules:
- /api/receipts/   accounts-receivable settlement (create, void, statistics)
- /api/customers/  customer account statements

Operational:
- /api/health/ (AllowAny): DB connectivity, payment routing table version,
  invoicing outbox backlog
- Django admin path configurable via ADMIN_PATH
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import DatabaseError, connections
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from invoicing.models import InvoiceRequest
from treasury.routing import ROUTING_TABLE_VERSION


# ------------------ API ROOT (PUBLIC) ------------------
@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "message": {"type": "string"},
                "auth": {"type": "object"},
                "docs": {"type": "object"},
                "modules": {"type": "object"},
            },
        }
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "ERP Receivables API is running",
            "auth": {
                "me": "/api/auth/me/",
                "jwt_create": "/api/auth/jwt/create/",
                "jwt_refresh": "/api/auth/jwt/refresh/",
            },
            "docs": {
                "swagger": "/api/docs/",
                "schema": "/api/schema/",
            },
            "modules": {
                "receipts": "/api/receipts/",
                "receipt_statistics": "/api/receipts/statistics/",
                "customer_account": "/api/customers/<customer_id>/account/",
            },
        }
    )


# ------------------ HEALTH CHECK (PUBLIC) ------------------
@extend_schema(
    responses={
        200: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
                "routing_table_version": {"type": "integer"},
                "invoicing_backlog": {"type": "integer"},
            },
        },
        503: {
            "type": "object",
            "properties": {
                "status": {"type": "string"},
                "db": {"type": "string"},
                "error": {"type": "string"},
            },
        },
    },
)
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    - DB answers a trivial query
    - invoice requests still waiting (pending + failed)
    """
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()

        backlog = InvoiceRequest.objects.filter(status__in=InvoiceRequest.OPEN_STATUSES).count()
    except DatabaseError as e:
        return Response({"status": "degraded", "db": "down", "error": str(e)}, status=503)

    return Response(
        {
            "status": "ok",
            "db": "ok",
            "routing_table_version": ROUTING_TABLE_VERSION,
            "invoicing_backlog": backlog,
        }
    )


# ------------------ ADMIN PATH ------------------
# Keep the trailing slash; in production pick a non-obvious value.
ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


# ------------------ API ROUTES (ALL UNDER /api/) ------------------
api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    # OpenAPI / Swagger
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    # JWT (SimpleJWT)
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("auth/", include("users.urls")),
    # Receivables
    path("receipts/", include("receipts.api.urls")),
    path("customers/", include("customers.api.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
