import uuid
from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from receipts.models import Receipt, ReceiptTender
from receipts.services.exceptions import ReceiptValidationError
from receipts.services.validation import (
    Regularization,
    SaleCollection,
    settlement_mode_for,
    validate_settlement_request,
)

CREATOR = object()


def check_payload(**overrides):
    payload = {
        "number": "00012345",
        "bank": "Banco Nacion",
        "issue_date": "2026-03-01",
        "due_date": "2026-04-01",
        "holder": "Juan Perez",
    }
    payload.update(overrides)
    return payload


class SettlementModeTests(SimpleTestCase):
    def test_no_sales_means_regularization(self):
        self.assertEqual(settlement_mode_for(None), Regularization())
        self.assertEqual(settlement_mode_for([]), Regularization())

    def test_sales_keep_caller_order(self):
        a, b = uuid.uuid4(), uuid.uuid4()
        mode = settlement_mode_for([str(b), a])
        self.assertIsInstance(mode, SaleCollection)
        self.assertEqual(mode.sale_ids, (b, a))

    def test_duplicate_sales_are_rejected(self):
        sale_id = uuid.uuid4()
        with self.assertRaises(ReceiptValidationError):
            settlement_mode_for([sale_id, sale_id])


class SettlementRequestValidationTests(SimpleTestCase):
    """
    Rules are checked in a fixed order and nothing touches the database.
    """

    def setUp(self):
        self.customer_id = uuid.uuid4()

    def validate(self, **kwargs):
        params = {
            "customer_id": self.customer_id,
            "tenders": [{"payment_method": "cash", "amount": "100"}],
            "creator": CREATOR,
        }
        params.update(kwargs)
        return validate_settlement_request(**params)

    def test_valid_regularization_defaults(self):
        request = self.validate()

        self.assertEqual(request.mode, Regularization())
        self.assertEqual(request.collection_timing, Receipt.TIMING_DEFERRED)
        self.assertEqual(request.observations, Receipt.REGULARIZATION_OBSERVATIONS)
        self.assertEqual(request.total_tendered, Decimal("100.00"))

    def test_customer_is_required(self):
        with self.assertRaisesMessage(ReceiptValidationError, "customer_id is required"):
            self.validate(customer_id=None)

    def test_malformed_customer_id(self):
        with self.assertRaises(ReceiptValidationError):
            self.validate(customer_id="not-a-uuid")

    def test_tenders_are_required(self):
        with self.assertRaisesMessage(ReceiptValidationError, "At least one tender"):
            self.validate(tenders=[])

    def test_non_positive_amounts_are_rejected(self):
        for amount in ("0", "-5", "abc", None):
            with self.subTest(amount=amount):
                with self.assertRaises(ReceiptValidationError):
                    self.validate(tenders=[{"payment_method": "cash", "amount": amount}])

    def test_unknown_payment_method_is_rejected(self):
        with self.assertRaisesMessage(ReceiptValidationError, "unknown payment method"):
            self.validate(tenders=[{"payment_method": "voucher", "amount": "10"}])

    def test_unknown_bank_is_rejected(self):
        with self.assertRaisesMessage(ReceiptValidationError, "unknown bank"):
            self.validate(tenders=[{"payment_method": "transfer", "amount": "10", "bank": "MOON"}])

    def test_creator_is_required(self):
        with self.assertRaisesMessage(ReceiptValidationError, "creator is required"):
            self.validate(creator=None)

    def test_tenders_are_checked_before_creator(self):
        with self.assertRaisesMessage(ReceiptValidationError, "At least one tender"):
            self.validate(tenders=None, creator=None)

    def test_unknown_collection_timing(self):
        with self.assertRaises(ReceiptValidationError):
            self.validate(collection_timing="someday")

    def test_sale_collection_keeps_observations_empty(self):
        request = self.validate(sale_ids=[uuid.uuid4()])
        self.assertIsInstance(request.mode, SaleCollection)
        self.assertEqual(request.observations, "")

    def test_valid_check_defaults_to_pending(self):
        request = self.validate(
            tenders=[{"payment_method": "check", "amount": "500", "check": check_payload()}]
        )
        check = request.tenders[0].check
        self.assertEqual(check.status, ReceiptTender.CHECK_PENDING)
        self.assertEqual(check.due_date, date(2026, 4, 1))

    def test_check_due_before_issue_is_rejected(self):
        with self.assertRaisesMessage(ReceiptValidationError, "due_date cannot be before issue_date"):
            self.validate(
                tenders=[
                    {
                        "payment_method": "check",
                        "amount": "500",
                        "check": check_payload(due_date="2026-02-01"),
                    }
                ]
            )

    def test_check_details_only_for_check_tenders(self):
        with self.assertRaises(ReceiptValidationError):
            self.validate(tenders=[{"payment_method": "cash", "amount": "5", "check": check_payload()}])

    def test_check_without_holder_is_rejected(self):
        with self.assertRaisesMessage(ReceiptValidationError, "holder is required"):
            self.validate(
                tenders=[{"payment_method": "check", "amount": "5", "check": check_payload(holder="")}]
            )
