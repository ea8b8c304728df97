import uuid
from decimal import Decimal
from unittest import mock

from django.test import TestCase

from customers.models import Customer, CustomerAccountEntry
from invoicing.models import Invoice, InvoiceRequest
from receipts.models import Receipt, ReceiptAllocation
from receipts.services.exceptions import ReceiptNotFoundError, ReceiptValidationError
from receipts.services.receipt_service import create_receipt
from receipts.tests.base import ReceiptFixturesMixin
from sales.models import Sale
from treasury.models import CashEntry


class CreateReceiptTests(ReceiptFixturesMixin, TestCase):
    """
    GUARANTEES:
    - sale balances, ledger, cash book and receipt move together
    - any failure leaves every store untouched
    """

    def create(self, sales=None, tenders=None, **kwargs):
        return create_receipt(
            customer_id=self.customer.pk,
            sale_ids=[s.pk for s in sales] if sales else None,
            tenders=tenders or [self.cash("1000.00")],
            creator=self.cashier,
            **kwargs,
        )

    # =====================================================
    # SETTLEMENT SCENARIOS
    # =====================================================

    def test_full_cash_settlement(self):
        sale = self.make_sale("1000.00")
        balance_before = self.reload(self.customer).running_balance

        receipt = self.create(sales=[sale], tenders=[self.cash("1000.00")])

        sale = self.reload(sale)
        self.assertEqual(sale.balance_due, Decimal("0.00"))
        self.assertEqual(sale.collection_state, Sale.COLLECTION_SETTLED)
        self.assertEqual(sale.granular_state, Sale.GRANULAR_COLLECTED)
        self.assertIn(receipt, sale.receipts.all())

        self.assertEqual(
            self.reload(self.customer).running_balance,
            balance_before - Decimal("1000.00"),
        )

        entries = CashEntry.objects.filter(receipt=receipt)
        self.assertEqual(entries.count(), 1)
        self.assertEqual(entries.get().amount, Decimal("1000.00"))

        self.assertTrue(receipt.number.startswith("REC-"))
        self.assertEqual(receipt.mode, Receipt.MODE_SALE_COLLECTION)
        self.assertEqual(receipt.amount_due, Decimal("1000.00"))
        self.assertEqual(receipt.customer_name, "Distribuidora Sur SA")

    def test_partial_cash_settlement(self):
        sale = self.make_sale("1000.00")

        receipt = self.create(sales=[sale], tenders=[self.cash("600.00")])

        sale = self.reload(sale)
        self.assertEqual(sale.balance_due, Decimal("400.00"))
        self.assertEqual(sale.collection_state, Sale.COLLECTION_PARTIAL)
        self.assertEqual(CashEntry.objects.filter(receipt=receipt).get().amount, Decimal("600.00"))
        self.assertEqual(receipt.amount_short, Decimal("400.00"))

    def test_two_sales_in_caller_order(self):
        first = self.make_sale("300.00")
        second = self.make_sale("500.00")

        receipt = self.create(sales=[first, second], tenders=[self.cash("700.00")])

        allocations = list(receipt.allocations.order_by("position"))
        self.assertEqual([a.sale_id for a in allocations], [first.pk, second.pk])
        self.assertEqual([a.amount_applied for a in allocations], [Decimal("300.00"), Decimal("400.00")])
        self.assertEqual(self.reload(first).collection_state, Sale.COLLECTION_SETTLED)
        self.assertEqual(self.reload(second).balance_due, Decimal("100.00"))

    def test_short_amount_includes_sales_left_unpaid(self):
        first = self.make_sale("300.00")
        second = self.make_sale("500.00")

        receipt = self.create(sales=[first, second], tenders=[self.cash("300.00")])

        self.assertEqual(receipt.allocations.count(), 1)
        self.assertEqual(receipt.amount_due, Decimal("800.00"))
        self.assertEqual(receipt.amount_short, Decimal("500.00"))
        self.assertEqual(self.reload(second).balance_due, Decimal("500.00"))

    def test_regularization_with_account_credit(self):
        sale = self.make_sale("1000.00")
        entries_before = CustomerAccountEntry.objects.count()

        receipt = self.create(tenders=[{"payment_method": "account_credit", "amount": "200.00"}])

        self.assertEqual(receipt.mode, Receipt.MODE_REGULARIZATION)
        self.assertEqual(receipt.amount_short, Decimal("0.00"))
        self.assertEqual(receipt.observations, Receipt.REGULARIZATION_OBSERVATIONS)
        self.assertFalse(receipt.allocations.exists())
        self.assertFalse(CashEntry.objects.exists())
        self.assertEqual(CustomerAccountEntry.objects.count(), entries_before)
        self.assertEqual(self.reload(sale).balance_due, Decimal("1000.00"))

    def test_one_cash_entry_per_money_tender(self):
        sale = self.make_sale("1000.00")

        receipt = self.create(
            sales=[sale],
            tenders=[
                self.cash("100.00"),
                {"payment_method": "transfer", "amount": "200.00", "bank": "SANTANDER"},
                {"payment_method": "account_credit", "amount": "50.00"},
                {"payment_method": "credit_card", "amount": "150.00"},
            ],
        )

        entries = CashEntry.objects.filter(receipt=receipt)
        self.assertEqual(entries.count(), 3)
        self.assertEqual(sum(e.amount for e in entries), Decimal("450.00"))
        self.assertEqual(receipt.tenders.count(), 4)
        self.assertEqual(self.reload(sale).amount_collected, Decimal("500.00"))

        credit = CustomerAccountEntry.objects.get(document_id=receipt.pk)
        self.assertEqual(credit.credit, Decimal("450.00"))

    def test_check_tender_is_stored_with_details(self):
        sale = self.make_sale("500.00")

        receipt = self.create(
            sales=[sale],
            tenders=[
                {
                    "payment_method": "check",
                    "amount": "500.00",
                    "check": {
                        "number": "778899",
                        "bank": "Banco Galicia",
                        "issue_date": "2026-05-01",
                        "due_date": "2026-06-01",
                        "holder": "Tercero SRL",
                    },
                }
            ],
        )

        tender = receipt.tenders.get()
        self.assertEqual(tender.check_number, "778899")
        self.assertEqual(tender.check_status, tender.CHECK_PENDING)
        self.assertEqual(CashEntry.objects.get(receipt=receipt).payment_method, "third_party_check")

    def test_running_balance_after_many_receipts(self):
        self.make_sale("5000.00")
        initial = self.reload(self.customer).running_balance

        amounts = ["100.00", "250.50", "0.50", "999.99"]
        for amount in amounts:
            self.create(tenders=[self.cash(amount), {"payment_method": "account_credit", "amount": "10.00"}])

        expected = initial - sum(Decimal(a) for a in amounts)
        self.assertEqual(self.reload(self.customer).running_balance, expected)

        latest = CustomerAccountEntry.objects.filter(customer=self.customer).order_by("-date", "-created_at").first()
        self.assertEqual(latest.balance, expected)

    # =====================================================
    # REJECTIONS (nothing written)
    # =====================================================

    def assertNothingWritten(self):
        self.assertFalse(Receipt.objects.exists())
        self.assertFalse(ReceiptAllocation.objects.exists())
        self.assertFalse(CashEntry.objects.exists())
        self.assertFalse(CustomerAccountEntry.objects.filter(entry_type=CustomerAccountEntry.TYPE_RECEIPT).exists())

    def test_unknown_customer(self):
        with self.assertRaises(ReceiptNotFoundError):
            create_receipt(customer_id=uuid.uuid4(), tenders=[self.cash("10.00")], creator=self.cashier)
        self.assertNothingWritten()

    def test_unknown_sale(self):
        sale = self.make_sale("100.00")
        with self.assertRaises(ReceiptNotFoundError):
            create_receipt(
                customer_id=self.customer.pk,
                sale_ids=[sale.pk, uuid.uuid4()],
                tenders=[self.cash("10.00")],
                creator=self.cashier,
            )
        self.assertNothingWritten()

    def test_sale_of_another_customer(self):
        other = Customer.objects.create(document_number="20999999990", first_name="Otro")
        foreign = self.make_sale("100.00", customer=other)

        with self.assertRaisesMessage(ReceiptValidationError, "do not belong to this customer"):
            self.create(sales=[foreign], tenders=[self.cash("100.00")])
        self.assertNothingWritten()

    def test_sales_of_mixed_customers(self):
        other = Customer.objects.create(document_number="20999999991", first_name="Otra")
        mine = self.make_sale("100.00")
        foreign = self.make_sale("100.00", customer=other)

        with self.assertRaisesMessage(ReceiptValidationError, "same customer"):
            self.create(sales=[mine, foreign], tenders=[self.cash("100.00")])
        self.assertNothingWritten()

    def test_already_settled_sale(self):
        sale = self.make_sale("100.00")
        self.create(sales=[sale], tenders=[self.cash("100.00")])

        with self.assertRaisesMessage(ReceiptValidationError, "no outstanding balance"):
            self.create(sales=[sale], tenders=[self.cash("100.00")])
        self.assertEqual(Receipt.objects.count(), 1)

    def test_cancelled_sale(self):
        sale = Sale.objects.create(customer=self.customer, total=Decimal("100.00"), status=Sale.STATUS_CANCELLED)
        with self.assertRaisesMessage(ReceiptValidationError, "cannot be collected"):
            self.create(sales=[sale], tenders=[self.cash("100.00")])
        self.assertNothingWritten()

    def test_failure_mid_transaction_rolls_everything_back(self):
        sale = self.make_sale("1000.00")
        balance_before = self.reload(self.customer).running_balance

        with mock.patch(
            "receipts.services.receipt_service.record_receipt_inflows",
            side_effect=RuntimeError("disk full"),
        ):
            with self.assertRaises(RuntimeError):
                self.create(sales=[sale], tenders=[self.cash("1000.00")])

        self.assertNothingWritten()
        sale = self.reload(sale)
        self.assertEqual(sale.balance_due, Decimal("1000.00"))
        self.assertFalse(sale.receipts.exists())
        self.assertEqual(self.reload(self.customer).running_balance, balance_before)


class InvoicingTriggerTests(ReceiptFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        Customer.objects.filter(pk=self.customer.pk).update(
            auto_invoicing=True,
            requires_tax_invoice=True,
        )
        self.sale = self.make_sale("1210.00")

    def collect(self):
        return create_receipt(
            customer_id=self.customer.pk,
            sale_ids=[self.sale.pk],
            tenders=[self.cash("1210.00")],
            creator=self.cashier,
        )

    def test_collected_sale_gets_draft_invoice_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            receipt = self.collect()

        self.assertEqual(len(callbacks), 1)
        request = InvoiceRequest.objects.get(receipt=receipt)
        self.assertEqual(request.status, InvoiceRequest.STATUS_DONE)
        self.assertTrue(Invoice.objects.filter(sale=self.sale).exists())
        self.assertTrue(self.reload(self.sale).invoiced)

    def test_invoicing_failure_keeps_the_receipt(self):
        with mock.patch(
            "invoicing.services.outbox.create_draft_invoice_for_sale",
            side_effect=RuntimeError("fiscal service down"),
        ):
            with self.captureOnCommitCallbacks(execute=True):
                receipt = self.collect()

        self.assertTrue(Receipt.objects.filter(pk=receipt.pk, status=Receipt.STATUS_ACTIVE).exists())
        self.assertEqual(self.reload(self.sale).balance_due, Decimal("0.00"))

        request = InvoiceRequest.objects.get(receipt=receipt)
        self.assertEqual(request.status, InvoiceRequest.STATUS_FAILED)
        self.assertFalse(Invoice.objects.exists())

    def test_regularization_never_enqueues(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            create_receipt(customer_id=self.customer.pk, tenders=[self.cash("10.00")], creator=self.cashier)

        self.assertEqual(callbacks, [])
        self.assertFalse(InvoiceRequest.objects.exists())
