# PATH: receipts/services/statistics.py

"""
COLLECTION STATISTICS (read-only)

- Active receipts: count + total collected (optionally within a date window)
- Collected per payment method
- Outstanding sales: count + balance
- Checks in portfolio: count + amount
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Count, Sum

from receipts.models import Receipt, ReceiptTender
from sales.models import Sale

ZERO = Decimal("0.00")


def collection_statistics(*, date_from=None, date_to=None, customer_id=None) -> dict:
    receipts = Receipt.objects.filter(status=Receipt.STATUS_ACTIVE)
    if date_from:
        receipts = receipts.filter(date__date__gte=date_from)
    if date_to:
        receipts = receipts.filter(date__date__lte=date_to)
    if customer_id:
        receipts = receipts.filter(customer_id=customer_id)

    receipt_totals = receipts.aggregate(count=Count("id"), total=Sum("amount_collected"))

    tenders = ReceiptTender.objects.filter(receipt__in=receipts)
    by_method = {
        row["payment_method"]: {
            "count": row["count"],
            "total": row["total"] or ZERO,
        }
        for row in tenders.values("payment_method")
        .annotate(count=Count("id"), total=Sum("amount"))
        .order_by("payment_method")
    }

    outstanding = Sale.objects.exclude(status=Sale.STATUS_CANCELLED).filter(balance_due__gt=0)
    if customer_id:
        outstanding = outstanding.filter(customer_id=customer_id)
    outstanding_totals = outstanding.aggregate(count=Count("id"), total=Sum("balance_due"))

    portfolio = ReceiptTender.objects.filter(
        receipt__status=Receipt.STATUS_ACTIVE,
        check_status__in=[ReceiptTender.CHECK_PENDING, ReceiptTender.CHECK_IN_PORTFOLIO],
    ).exclude(check_number="")
    if customer_id:
        portfolio = portfolio.filter(receipt__customer_id=customer_id)
    portfolio_totals = portfolio.aggregate(count=Count("id"), total=Sum("amount"))

    return {
        "receipts": {
            "count": receipt_totals["count"] or 0,
            "total_collected": receipt_totals["total"] or ZERO,
        },
        "by_payment_method": by_method,
        "outstanding_sales": {
            "count": outstanding_totals["count"] or 0,
            "total_balance": outstanding_totals["total"] or ZERO,
        },
        "checks_in_portfolio": {
            "count": portfolio_totals["count"] or 0,
            "total": portfolio_totals["total"] or ZERO,
        },
    }
