from decimal import Decimal
from io import StringIO
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase, override_settings

from customers.models import Customer
from invoicing.models import Invoice, InvoiceRequest
from invoicing.services.draft_invoice import create_draft_invoice_for_sale
from invoicing.services.exceptions import SaleAlreadyInvoicedError
from invoicing.services.outbox import (
    cancel_for_receipt,
    dispatch_receipt,
    enqueue_for_receipt,
    process_pending,
    process_request,
)
from receipts.models import Receipt
from sales.models import Sale

User = get_user_model()


@override_settings(COMPANY_VAT_CONDITION="Responsable Inscripto")
class InvoicingOutboxTests(TestCase):
    """
    GUARANTEES:
    - requests are enqueued only for auto-invoicing customers
    - a failed request is recorded, never raised
    - retries pick up failed requests below the attempt limit
    """

    def setUp(self):
        self.user = User.objects.create_user(email="billing@example.com", password="pass", role="manager")
        self.customer = Customer.objects.create(
            document_type=Customer.DOC_CUIT,
            document_number="30711111119",
            business_name="Ferreteria Norte SRL",
            first_name="Juan",
            vat_condition=Customer.VAT_REGISTERED,
            auto_invoicing=True,
            requires_tax_invoice=True,
        )
        self.sale = Sale.objects.create(
            customer=self.customer,
            total=Decimal("1210.00"),
            status=Sale.STATUS_CONFIRMED,
        )
        self.receipt = Receipt.objects.create(
            customer=self.customer,
            customer_name=self.customer.display_name,
            mode=Receipt.MODE_SALE_COLLECTION,
            amount_due=Decimal("1210.00"),
            amount_collected=Decimal("1210.00"),
            created_by=self.user,
        )

    def test_enqueue_skips_customers_without_auto_invoicing(self):
        Customer.objects.filter(pk=self.customer.pk).update(auto_invoicing=False)
        self.receipt.customer.refresh_from_db()

        self.assertEqual(enqueue_for_receipt(receipt=self.receipt, sales=[self.sale]), [])

    def test_dispatch_creates_draft_invoice(self):
        enqueue_for_receipt(receipt=self.receipt, sales=[self.sale])

        [request] = dispatch_receipt(self.receipt.pk, username="billing")

        self.assertEqual(request.status, InvoiceRequest.STATUS_DONE)
        self.assertEqual(request.attempts, 1)

        invoice = Invoice.objects.get(sale=self.sale)
        self.assertEqual(invoice.voucher_type, Invoice.VOUCHER_A)
        self.assertEqual(invoice.net_amount, Decimal("1000.00"))
        self.assertEqual(invoice.vat_amount, Decimal("210.00"))
        self.assertEqual(invoice.created_by_username, "billing")
        self.assertTrue(Sale.objects.get(pk=self.sale.pk).invoiced)

    def test_sale_cannot_be_invoiced_twice(self):
        create_draft_invoice_for_sale(sale_id=self.sale.pk)
        with self.assertRaises(SaleAlreadyInvoicedError):
            create_draft_invoice_for_sale(sale_id=self.sale.pk)

    def test_unexpected_failure_is_recorded_not_raised(self):
        enqueue_for_receipt(receipt=self.receipt, sales=[self.sale])

        with mock.patch(
            "invoicing.services.outbox.create_draft_invoice_for_sale",
            side_effect=RuntimeError("fiscal service down"),
        ):
            [request] = dispatch_receipt(self.receipt.pk)

        self.assertEqual(request.status, InvoiceRequest.STATUS_FAILED)
        self.assertIn("fiscal service down", request.last_error)
        self.assertFalse(Invoice.objects.exists())

    def test_retry_command_processes_failed_requests(self):
        enqueue_for_receipt(receipt=self.receipt, sales=[self.sale])
        with mock.patch(
            "invoicing.services.outbox.create_draft_invoice_for_sale",
            side_effect=RuntimeError("timeout"),
        ):
            dispatch_receipt(self.receipt.pk)

        out = StringIO()
        call_command("process_invoicing_outbox", stdout=out)

        request = InvoiceRequest.objects.get(sale=self.sale)
        self.assertEqual(request.status, InvoiceRequest.STATUS_DONE)
        self.assertEqual(request.attempts, 2)
        self.assertIn("Done: 1", out.getvalue())

    def test_requests_at_attempt_limit_are_skipped(self):
        [request] = enqueue_for_receipt(receipt=self.receipt, sales=[self.sale])
        InvoiceRequest.objects.filter(pk=request.pk).update(
            status=InvoiceRequest.STATUS_FAILED,
            attempts=3,
        )

        self.assertEqual(process_pending(max_attempts=3), [])

    def test_request_of_voided_receipt_is_cancelled_not_drafted(self):
        [request] = enqueue_for_receipt(receipt=self.receipt, sales=[self.sale])
        Receipt.objects.filter(pk=self.receipt.pk).update(status=Receipt.STATUS_VOID)

        request = process_request(request.pk)

        self.assertEqual(request.status, InvoiceRequest.STATUS_CANCELLED)
        self.assertEqual(request.attempts, 0)
        self.assertFalse(Invoice.objects.exists())
        self.assertFalse(Sale.objects.get(pk=self.sale.pk).invoiced)

    def test_cancel_for_receipt_leaves_done_requests_alone(self):
        [request] = enqueue_for_receipt(receipt=self.receipt, sales=[self.sale])
        dispatch_receipt(self.receipt.pk)

        self.assertEqual(cancel_for_receipt(receipt=self.receipt), 0)
        self.assertEqual(InvoiceRequest.objects.get(pk=request.pk).status, InvoiceRequest.STATUS_DONE)
