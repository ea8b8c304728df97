# receipts/api/urls.py

"""
RECEIPTS API URLS

Mounted at /api/receipts/ (backend/urls.py).
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from receipts.api.views import ReceiptViewSet

router = DefaultRouter()
router.register(r"", ReceiptViewSet, basename="receipts")

urlpatterns = [
    path("", include(router.urls)),
]
