import uuid
from decimal import Decimal
from io import StringIO
from types import SimpleNamespace

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase

from customers.models import Customer, CustomerAccountEntry
from customers.services.account_ledger import (
    AccountLedgerError,
    account_statement,
    last_active_entry,
    post_receipt_credit,
    post_receipt_reversal,
    post_sale_charge,
)
from sales.models import Sale


def fake_receipt(number="REC-202601-0001"):
    return SimpleNamespace(pk=uuid.uuid4(), number=number)


class AccountLedgerTests(TestCase):
    """
    GUARANTEES:
    - running_balance always equals the balance of the latest entry
    - each entry's balance = prior - credit + debit
    - entries are append-only
    """

    def setUp(self):
        self.customer = Customer.objects.create(
            document_number="20111111112",
            first_name="Ana",
            last_name="Gomez",
        )
        self.sale = Sale.objects.create(customer=self.customer, total=Decimal("300.00"))

    def test_sale_charge_increases_balance(self):
        entry = post_sale_charge(customer=self.customer, sale=self.sale)

        self.customer.refresh_from_db()
        self.assertEqual(entry.entry_type, CustomerAccountEntry.TYPE_SALE)
        self.assertEqual(entry.debit, Decimal("300.00"))
        self.assertEqual(entry.balance, Decimal("300.00"))
        self.assertEqual(self.customer.running_balance, Decimal("300.00"))

    def test_receipt_credit_reduces_balance(self):
        post_sale_charge(customer=self.customer, sale=self.sale)
        entry = post_receipt_credit(customer=self.customer, amount=Decimal("120.00"), receipt=fake_receipt())

        self.customer.refresh_from_db()
        self.assertEqual(entry.credit, Decimal("120.00"))
        self.assertEqual(entry.balance, Decimal("180.00"))
        self.assertEqual(self.customer.running_balance, Decimal("180.00"))

    def test_caller_instance_is_kept_in_sync(self):
        post_receipt_credit(customer=self.customer, amount=Decimal("50.00"), receipt=fake_receipt())
        self.assertEqual(self.customer.running_balance, Decimal("-50.00"))

    def test_reversal_restores_balance(self):
        receipt = fake_receipt()
        post_receipt_credit(customer=self.customer, amount=Decimal("75.00"), receipt=receipt)
        entry = post_receipt_reversal(customer=self.customer, amount=Decimal("75.00"), receipt=receipt, reason="typo")

        self.customer.refresh_from_db()
        self.assertEqual(entry.entry_type, CustomerAccountEntry.TYPE_RECEIPT_REVERSAL)
        self.assertIn("typo", entry.concept)
        self.assertEqual(self.customer.running_balance, Decimal("0.00"))

    def test_running_balance_matches_latest_entry_after_many_postings(self):
        post_sale_charge(customer=self.customer, sale=self.sale)
        for amount in ("10.00", "20.50", "0.01", "99.99"):
            post_receipt_credit(customer=self.customer, amount=Decimal(amount), receipt=fake_receipt())

        self.customer.refresh_from_db()
        latest = last_active_entry(self.customer)
        self.assertEqual(self.customer.running_balance, latest.balance)
        self.assertEqual(self.customer.running_balance, Decimal("169.50"))

    def test_zero_amount_is_rejected(self):
        with self.assertRaises(AccountLedgerError):
            post_receipt_credit(customer=self.customer, amount=Decimal("0.00"), receipt=fake_receipt())

        self.assertFalse(CustomerAccountEntry.objects.exists())

    def test_statement_is_chronological(self):
        post_sale_charge(customer=self.customer, sale=self.sale)
        post_receipt_credit(customer=self.customer, amount=Decimal("100.00"), receipt=fake_receipt())

        balances = [e.balance for e in account_statement(self.customer)]
        self.assertEqual(balances, [Decimal("300.00"), Decimal("200.00")])


class AccountEntryImmutabilityTests(TestCase):
    def setUp(self):
        self.customer = Customer.objects.create(document_number="20222222223", first_name="Luis")
        self.entry = post_receipt_credit(
            customer=self.customer,
            amount=Decimal("10.00"),
            receipt=fake_receipt(),
        )

    def test_amounts_cannot_be_edited(self):
        self.entry.credit = Decimal("11.00")
        with self.assertRaises(ValidationError):
            self.entry.save()

    def test_entries_cannot_be_deleted(self):
        with self.assertRaises(ValidationError):
            self.entry.delete()

    def test_voiding_is_the_only_allowed_update(self):
        self.entry.voided = True
        self.entry.void_reason = "duplicate"
        self.entry.save()

        self.entry.refresh_from_db()
        self.assertTrue(self.entry.voided)

        self.entry.voided = False
        with self.assertRaises(ValidationError):
            self.entry.save()


class VerifyCustomerBalancesCommandTests(TestCase):
    def setUp(self):
        self.customer = Customer.objects.create(document_number="20333333334", first_name="Eva")
        post_receipt_credit(customer=self.customer, amount=Decimal("40.00"), receipt=fake_receipt())

    def test_consistent_balances_pass(self):
        out = StringIO()
        call_command("verify_customer_balances", "--strict", stdout=out)
        self.assertIn("[OK]", out.getvalue())

    def test_mismatch_fails_in_strict_mode(self):
        Customer.objects.filter(pk=self.customer.pk).update(running_balance=Decimal("1.00"))

        err = StringIO()
        with self.assertRaises(SystemExit):
            call_command("verify_customer_balances", "--strict", stdout=StringIO(), stderr=err)
        self.assertIn("20333333334", err.getvalue())
