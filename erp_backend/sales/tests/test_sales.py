from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase

from customers.models import Customer, CustomerAccountEntry
from sales.models import Sale
from sales.services.sale_lifecycle import (
    InvalidSaleTransitionError,
    derive_collection_state,
    validate_transition,
)
from sales.services.sale_service import cancel_sale, confirm_sale

User = get_user_model()


class SaleModelTests(TestCase):
    """
    Tests for Sale lifecycle and immutability.

    GUARANTEES:
    - balance_due is always total - amount_collected
    - Sale totals are preserved after confirmation
    - Illegal transitions are blocked
    """

    def setUp(self):
        self.user = User.objects.create_user(
            email="cashier@example.com",
            password="pass",
            role="cashier",
        )
        self.customer = Customer.objects.create(
            document_number="30700000001",
            business_name="Acme SA",
            first_name="Acme",
        )
        self.sale = Sale.objects.create(
            customer=self.customer,
            user=self.user,
            total=Decimal("250.00"),
        )

    # =====================================================
    # MODEL
    # =====================================================

    def test_number_and_balance_are_derived_on_create(self):
        self.assertTrue(self.sale.number.startswith("VTA"))
        self.assertEqual(self.sale.balance_due, Decimal("250.00"))
        self.assertEqual(self.sale.collection_state, Sale.COLLECTION_UNPAID)

    def test_total_is_immutable_after_confirmation(self):
        confirm_sale(sale=self.sale, user=self.user)

        sale = Sale.objects.get(pk=self.sale.pk)
        sale.total = Decimal("999.00")
        with self.assertRaises(ValidationError):
            sale.save()

    # =====================================================
    # LIFECYCLE
    # =====================================================

    def test_confirm_charges_customer_account(self):
        confirm_sale(sale=self.sale, user=self.user)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.running_balance, Decimal("250.00"))

        entry = CustomerAccountEntry.objects.get(customer=self.customer)
        self.assertEqual(entry.entry_type, CustomerAccountEntry.TYPE_SALE)
        self.assertEqual(entry.document_id, self.sale.pk)

    def test_cancel_confirmed_sale_credits_it_back(self):
        confirm_sale(sale=self.sale, user=self.user)
        cancel_sale(sale=self.sale, user=self.user)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.running_balance, Decimal("0.00"))
        self.assertEqual(Sale.objects.get(pk=self.sale.pk).status, Sale.STATUS_CANCELLED)

    def test_cancel_pending_sale_posts_nothing(self):
        cancel_sale(sale=self.sale, user=self.user)
        self.assertFalse(CustomerAccountEntry.objects.exists())

    def test_cancelled_sale_is_terminal(self):
        cancel_sale(sale=self.sale, user=self.user)
        self.sale.refresh_from_db()

        with self.assertRaises(InvalidSaleTransitionError):
            validate_transition(sale=self.sale, target_status=Sale.STATUS_CONFIRMED)
        self.assertFalse(self.sale.is_collectible)

    def test_cannot_cancel_sale_with_collected_money(self):
        Sale.objects.filter(pk=self.sale.pk).update(
            amount_collected=Decimal("10.00"),
            balance_due=Decimal("240.00"),
        )
        with self.assertRaises(ValueError):
            cancel_sale(sale=self.sale, user=self.user)


class CollectionStateTests(SimpleTestCase):
    def test_states(self):
        self.assertEqual(derive_collection_state(total="100", amount_collected="0"), Sale.COLLECTION_UNPAID)
        self.assertEqual(derive_collection_state(total="100", amount_collected="40"), Sale.COLLECTION_PARTIAL)
        self.assertEqual(derive_collection_state(total="100", amount_collected="100"), Sale.COLLECTION_SETTLED)
