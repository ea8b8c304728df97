from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase

from customers.models import Customer
from receipts.models import Receipt, ReceiptTender
from treasury.models import CashEntry
from treasury.routing import ACCOUNT_CASH, ACCOUNT_SANTANDER
from treasury.services.cash_book import compensate_receipt_entries, record_receipt_inflows

User = get_user_model()


class CashBookTests(TestCase):
    """
    GUARANTEES:
    - one inflow per money-moving tender, none for account credit
    - entries created by a receipt are locked
    - compensation appends opposite entries and never edits originals
    """

    def setUp(self):
        self.user = User.objects.create_user(email="treasurer@example.com", password="pass", role="manager")
        self.customer = Customer.objects.create(document_number="20444444445", first_name="Rosa", last_name="Paz")
        self.receipt = Receipt.objects.create(
            customer=self.customer,
            customer_name=self.customer.display_name,
            customer_document=self.customer.document_number,
            mode=Receipt.MODE_REGULARIZATION,
            amount_due=Decimal("180.00"),
            amount_collected=Decimal("180.00"),
            created_by=self.user,
        )
        self.tenders = [
            ReceiptTender.objects.create(
                receipt=self.receipt, payment_method="cash", amount=Decimal("100.00"), position=0
            ),
            ReceiptTender.objects.create(
                receipt=self.receipt,
                payment_method="debit_card",
                amount=Decimal("50.00"),
                bank=ACCOUNT_SANTANDER,
                position=1,
            ),
            ReceiptTender.objects.create(
                receipt=self.receipt, payment_method="account_credit", amount=Decimal("30.00"), position=2
            ),
        ]

    def test_inflows_skip_account_credit(self):
        entries = record_receipt_inflows(receipt=self.receipt, tenders=self.tenders)

        self.assertEqual(len(entries), 2)
        self.assertEqual([e.account for e in entries], [ACCOUNT_CASH, ACCOUNT_SANTANDER])
        self.assertTrue(all(e.direction == CashEntry.DIRECTION_INFLOW for e in entries))
        self.assertEqual(sum(e.amount for e in entries), Decimal("150.00"))

    def test_receipt_entries_are_locked(self):
        entry = record_receipt_inflows(receipt=self.receipt, tenders=self.tenders)[0]

        entry.comment = "edited"
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

    def test_compensation_nets_to_zero_and_is_idempotent(self):
        record_receipt_inflows(receipt=self.receipt, tenders=self.tenders)

        first = compensate_receipt_entries(receipt=self.receipt, reason="wrong customer")
        second = compensate_receipt_entries(receipt=self.receipt, reason="again")

        self.assertEqual(len(first), 2)
        self.assertEqual(second, [])

        net = sum(e.signed_amount for e in CashEntry.objects.filter(receipt=self.receipt))
        self.assertEqual(net, Decimal("0.00"))
        self.assertTrue(all(e.reverses_id for e in first))

    def test_unlinked_entries_stay_editable(self):
        entry = CashEntry.objects.create(
            category="other",
            payment_method="cash",
            direction=CashEntry.DIRECTION_OUTFLOW,
            amount=Decimal("5.00"),
            account=ACCOUNT_CASH,
        )
        entry.comment = "petty cash"
        entry.save()
        entry.delete()
        self.assertFalse(CashEntry.objects.filter(pk=entry.pk).exists())
