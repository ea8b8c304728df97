from decimal import Decimal

from django.contrib.auth import get_user_model

from customers.models import Customer
from sales.models import Sale
from sales.services.sale_service import confirm_sale

User = get_user_model()


class ReceiptFixturesMixin:
    """
    Shared data for receipt tests:
    - a cashier (creator) and a manager (voider)
    - one customer with confirmed sales charged to the account
    """

    def setUp(self):
        self.cashier = User.objects.create_user(
            email="cashier@example.com",
            password="pass",
            role="cashier",
        )
        self.manager = User.objects.create_user(
            email="manager@example.com",
            password="pass",
            role="manager",
        )
        self.customer = Customer.objects.create(
            document_type=Customer.DOC_CUIT,
            document_number="30722222228",
            business_name="Distribuidora Sur SA",
            first_name="Marta",
        )

    def make_sale(self, total, customer=None) -> Sale:
        sale = Sale.objects.create(
            customer=customer or self.customer,
            user=self.cashier,
            total=Decimal(total),
        )
        return confirm_sale(sale=sale, user=self.cashier)

    def cash(self, amount):
        return {"payment_method": "cash", "amount": Decimal(amount)}

    def reload(self, obj):
        obj.refresh_from_db()
        return obj
