# sales/services/sale_service.py

"""
SALE SERVICE

Confirmation / cancellation of account sales.

Confirming a sale charges its total to the customer's current account
(the debit that receipts later settle).
"""

import logging

from django.db import transaction

from customers.models import Customer
from customers.services.account_ledger import post_sale_cancellation, post_sale_charge
from sales.models import Sale
from sales.services.sale_lifecycle import validate_transition

logger = logging.getLogger("sales")


@transaction.atomic
def confirm_sale(*, sale: Sale, user=None) -> Sale:
    # customer first, then the sale (same order as receipts)
    Customer.objects.select_for_update().get(pk=sale.customer_id)
    sale = Sale.objects.select_for_update().get(pk=sale.pk)

    validate_transition(sale=sale, target_status=Sale.STATUS_CONFIRMED)

    sale.status = Sale.STATUS_CONFIRMED
    sale.granular_state = Sale.GRANULAR_CONFIRMED
    sale.save(update_fields=["status", "granular_state", "updated_at"])

    if sale.total > 0:
        post_sale_charge(customer=sale.customer_id, sale=sale, user=user)

    logger.info("Sale confirmed", extra={"sale_id": str(sale.pk), "number": sale.number})
    return sale


@transaction.atomic
def cancel_sale(*, sale: Sale, user=None) -> Sale:
    # customer first, then the sale (same order as receipts)
    Customer.objects.select_for_update().get(pk=sale.customer_id)
    sale = Sale.objects.select_for_update().get(pk=sale.pk)

    validate_transition(sale=sale, target_status=Sale.STATUS_CANCELLED)

    if sale.amount_collected > 0:
        raise ValueError("Sales with collected money cannot be cancelled; void the receipts first")

    was_confirmed = sale.status == Sale.STATUS_CONFIRMED

    sale.status = Sale.STATUS_CANCELLED
    sale.granular_state = Sale.GRANULAR_CANCELLED
    sale.save(update_fields=["status", "granular_state", "updated_at"])

    if was_confirmed and sale.total > 0:
        post_sale_cancellation(customer=sale.customer_id, sale=sale, user=user)

    logger.info("Sale cancelled", extra={"sale_id": str(sale.pk), "number": sale.number})
    return sale
