"""Back-office reports: dashboard counters and sales over time.

Computed on request from the Order, Customer and Product aggregates. Revenue
only counts orders whose payment has been collected.
"""

from collections import defaultdict
from datetime import datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from grocery.catalogue.product import Product
from grocery.identity.customer import Customer, Role
from grocery.order.order import Order, OrderStatus, PaymentStatus

_BATCH_SIZE = 500

OPEN_STATUSES = (OrderStatus.PLACED.value, OrderStatus.CONFIRMED.value, OrderStatus.PREPARING.value)


class SalesPeriod(Enum):
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    LAST_12_MONTHS = "12months"


def _orders():
    return current_domain.repository_for(Order)._dao.query


def _every(query):
    """Yield every record matched by ``query``, fetching in batches."""
    query = query.order_by("created_at")
    offset = 0
    while True:
        batch = query.offset(offset).limit(_BATCH_SIZE).all().items
        yield from batch
        if len(batch) < _BATCH_SIZE:
            return
        offset += _BATCH_SIZE


def _revenue(query) -> float:
    return round(sum(order.total_amount for order in _every(query)), 2)


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def dashboard_stats(now: datetime | None = None) -> dict:
    now = now or datetime.now()
    today = _start_of_day(now)

    paid = _orders().filter(payment_status=PaymentStatus.PAID.value)
    active_products = current_domain.repository_for(Product)._dao.query.filter(is_active=True)
    customers = current_domain.repository_for(Customer)._dao.query.filter(role=Role.CUSTOMER.value)

    return {
        "total_orders": _orders().all().total,
        "today_orders": _orders().filter(created_at__gte=today).all().total,
        "total_revenue": _revenue(paid),
        "today_revenue": _revenue(paid.filter(created_at__gte=today)),
        "total_customers": customers.all().total,
        "total_products": active_products.all().total,
        "pending_orders": _orders().filter(status__in=list(OPEN_STATUSES)).all().total,
        "low_stock_products": sum(1 for product in _every(active_products) if product.is_low_stock),
    }


def _period_start(period: SalesPeriod, now: datetime) -> datetime:
    if period == SalesPeriod.LAST_7_DAYS:
        return now - timedelta(days=7)
    if period == SalesPeriod.LAST_30_DAYS:
        return now - timedelta(days=30)
    try:
        return now.replace(year=now.year - 1)
    except ValueError:
        # 29 February has no counterpart a year earlier
        return now.replace(year=now.year - 1, day=28)


def sales_graph(period: str = SalesPeriod.LAST_7_DAYS.value, now: datetime | None = None) -> list[dict]:
    """Paid orders and revenue per day, or per month for the 12-month view, oldest first."""
    try:
        period = SalesPeriod(period)
    except ValueError:
        raise ValidationError({"period": [f"Unknown period '{period}'"]}) from None

    now = now or datetime.now()
    bucket_format = "%Y-%m" if period == SalesPeriod.LAST_12_MONTHS else "%Y-%m-%d"

    buckets = defaultdict(lambda: {"orders": 0, "revenue": 0.0})
    paid = _orders().filter(payment_status=PaymentStatus.PAID.value, created_at__gte=_period_start(period, now))
    for order in _every(paid):
        bucket = buckets[order.created_at.strftime(bucket_format)]
        bucket["orders"] += 1
        bucket["revenue"] += order.total_amount

    return [
        {"date": label, "orders": bucket["orders"], "revenue": round(bucket["revenue"], 2)}
        for label, bucket in sorted(buckets.items())
    ]
