import uuid
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from rest_framework import status
from rest_framework.test import APIClient, APITestCase, APITransactionTestCase

from customers.models import Customer
from invoicing.models import InvoiceRequest
from receipts.models import Receipt
from receipts.tests.base import ReceiptFixturesMixin
from sales.models import Sale

User = get_user_model()


class ReceiptApiTests(ReceiptFixturesMixin, APITestCase):
    """
    POST /api/receipts/, POST|PATCH /api/receipts/<id>/void/,
    list / detail / statistics, and their error bodies.
    """

    url = "/api/receipts/"

    def setUp(self):
        super().setUp()
        self.viewer = User.objects.create_user(email="viewer@example.com", password="pass", role="viewer")
        self.client = APIClient()
        self.client.force_authenticate(user=self.cashier)
        self.sale = self.make_sale("1000.00")

    def payload(self, **overrides):
        data = {
            "customer_id": str(self.customer.pk),
            "sale_ids": [str(self.sale.pk)],
            "tenders": [{"payment_method": "cash", "amount": "1000.00"}],
        }
        data.update(overrides)
        return data

    def void_url(self, receipt_id):
        return f"{self.url}{receipt_id}/void/"

    # =====================================================
    # CREATE
    # =====================================================

    def test_create_returns_receipt_with_allocations_and_totals(self):
        res = self.client.post(self.url, self.payload(), format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["mode"], Receipt.MODE_SALE_COLLECTION)
        self.assertEqual(res.data["totals"]["amount_collected"], "1000.00")
        self.assertEqual(res.data["totals"]["amount_short"], "0.00")
        self.assertEqual(len(res.data["allocations"]), 1)
        self.assertEqual(res.data["allocations"][0]["amount_applied"], "1000.00")
        self.assertEqual(res.data["created_by"], self.cashier.username)

    def test_validation_failure_returns_400_error_body(self):
        res = self.client.post(
            self.url,
            self.payload(tenders=[{"payment_method": "cash", "amount": "0"}]),
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "validation_error")
        self.assertIn("amount", res.data["error"]["message"])
        self.assertFalse(Receipt.objects.exists())

    def test_malformed_payload_returns_400(self):
        res = self.client.post(self.url, {"tenders": "nope"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "validation_error")
        self.assertIn("details", res.data["error"])

    def test_unknown_customer_returns_404(self):
        res = self.client.post(self.url, self.payload(customer_id=str(uuid.uuid4()), sale_ids=[]), format="json")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "not_found")

    def test_unknown_sale_returns_404(self):
        res = self.client.post(self.url, self.payload(sale_ids=[str(uuid.uuid4())]), format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_unexpected_error_returns_500_and_rolls_back(self):
        with mock.patch(
            "receipts.services.receipt_service.post_receipt",
            side_effect=RuntimeError("boom"),
        ):
            res = self.client.post(self.url, self.payload(), format="json")

        self.assertEqual(res.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(res.data["error"]["code"], "internal_error")
        self.assertFalse(Receipt.objects.exists())
        self.sale.refresh_from_db()
        self.assertEqual(self.sale.balance_due, Decimal("1000.00"))

    # =====================================================
    # VOID
    # =====================================================

    def create_receipt(self):
        res = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        return res.data["id"]

    def test_manager_can_void(self):
        receipt_id = self.create_receipt()
        self.client.force_authenticate(user=self.manager)

        res = self.client.post(self.void_url(receipt_id), {"void_reason": "wrong amount"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["status"], Receipt.STATUS_VOID)
        self.assertEqual(res.data["void_reason"], "wrong amount")
        self.assertEqual(res.data["modified_by"], self.manager.username)

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.collection_state, Sale.COLLECTION_UNPAID)

    def test_void_accepts_patch(self):
        receipt_id = self.create_receipt()
        self.client.force_authenticate(user=self.manager)

        res = self.client.patch(self.void_url(receipt_id), {"void_reason": "typo"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_void_without_reason_returns_400(self):
        receipt_id = self.create_receipt()
        self.client.force_authenticate(user=self.manager)

        res = self.client.post(self.void_url(receipt_id), {}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "validation_error")

    def test_double_void_returns_400(self):
        receipt_id = self.create_receipt()
        self.client.force_authenticate(user=self.manager)

        self.client.post(self.void_url(receipt_id), {"void_reason": "first"}, format="json")
        res = self.client.post(self.void_url(receipt_id), {"void_reason": "second"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("already void", res.data["error"]["message"])

    def test_overlong_void_reason_returns_400(self):
        receipt_id = self.create_receipt()
        self.client.force_authenticate(user=self.manager)

        res = self.client.post(self.void_url(receipt_id), {"void_reason": "x" * 256}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Receipt.objects.get(pk=receipt_id).status, Receipt.STATUS_ACTIVE)

    def test_void_unknown_receipt_returns_404(self):
        self.client.force_authenticate(user=self.manager)
        res = self.client.post(self.void_url(uuid.uuid4()), {"void_reason": "x"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    # =====================================================
    # PERMISSIONS
    # =====================================================

    def test_cashier_cannot_void(self):
        receipt_id = self.create_receipt()
        res = self.client.post(self.void_url(receipt_id), {"void_reason": "x"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_viewer_can_list_but_not_create(self):
        self.create_receipt()
        self.client.force_authenticate(user=self.viewer)

        listed = self.client.get(self.url)
        self.assertEqual(listed.status_code, status.HTTP_200_OK)
        self.assertEqual(listed.data["count"], 1)

        created = self.client.post(self.url, self.payload(), format="json")
        self.assertEqual(created.status_code, status.HTTP_403_FORBIDDEN)

    def test_anonymous_is_rejected(self):
        self.client.force_authenticate(user=None)
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    # =====================================================
    # READ
    # =====================================================

    def test_list_filters_by_status(self):
        receipt_id = self.create_receipt()
        self.client.post(
            self.url,
            self.payload(sale_ids=[], tenders=[{"payment_method": "cash", "amount": "5.00"}]),
            format="json",
        )
        self.client.force_authenticate(user=self.manager)
        self.client.post(self.void_url(receipt_id), {"void_reason": "x"}, format="json")

        res = self.client.get(self.url, {"status": Receipt.STATUS_VOID})
        self.assertEqual(res.data["count"], 1)
        self.assertEqual(res.data["results"][0]["id"], receipt_id)

    def test_statistics_requires_reports_capability(self):
        self.create_receipt()

        res = self.client.get(f"{self.url}statistics/")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.manager)
        res = self.client.get(f"{self.url}statistics/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["receipts"]["count"], 1)
        self.assertEqual(res.data["receipts"]["total_collected"], Decimal("1000.00"))
        self.assertEqual(res.data["by_payment_method"]["cash"]["count"], 1)
        self.assertEqual(res.data["outstanding_sales"]["count"], 0)


class ReceiptCommitApiTests(ReceiptFixturesMixin, APITransactionTestCase):
    """
    Real commits: invoicing runs after the receipt transaction and can
    never turn a committed receipt into an error response.
    """

    url = "/api/receipts/"

    def setUp(self):
        super().setUp()
        Customer.objects.filter(pk=self.customer.pk).update(
            auto_invoicing=True,
            requires_tax_invoice=True,
        )
        self.client = APIClient()
        self.client.force_authenticate(user=self.cashier)
        self.sale = self.make_sale("1210.00")

    def test_database_error_while_invoicing_still_returns_201(self):
        payload = {
            "customer_id": str(self.customer.pk),
            "sale_ids": [str(self.sale.pk)],
            "tenders": [{"payment_method": "cash", "amount": "1210.00"}],
        }

        with mock.patch(
            "invoicing.services.outbox.process_request",
            side_effect=DatabaseError("outbox unavailable"),
        ):
            with self.assertLogs("django.db.backends.base", level="ERROR"):
                res = self.client.post(self.url, payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(Receipt.objects.count(), 1)
        self.assertEqual(res.data["id"], str(Receipt.objects.get().pk))

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.balance_due, Decimal("0.00"))

        request = InvoiceRequest.objects.get(receipt_id=res.data["id"])
        self.assertEqual(request.status, InvoiceRequest.STATUS_PENDING)
