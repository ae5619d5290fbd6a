"""Application tests for the back-office dashboard counters and sales graph."""

from datetime import datetime, timedelta

import pytest
from grocery.catalogue.product_management import DeactivateProduct
from grocery.order.order import Order
from grocery.order.payment import ConfirmPayment
from grocery.order.reports import dashboard_stats, sales_graph
from protean import current_domain
from protean.exceptions import ValidationError


@pytest.fixture()
def checkout(customer_id, address_id, product_id, fill_cart, place_order):
    """Factory: place a one-item order, optionally paying for it online."""

    def _checkout(paid=False):
        fill_cart(customer_id, product_id)
        if not paid:
            return place_order(customer_id, address_id)
        order_id = place_order(customer_id, address_id, payment_method="razorpay")
        current_domain.process(ConfirmPayment(order_id=order_id, payment_id="pay_001"), asynchronous=False)
        return order_id

    return _checkout


def _backdate(order_id, when):
    repo = current_domain.repository_for(Order)
    order = repo.get(order_id)
    order.created_at = when
    repo.add(order)


class TestDashboardStats:
    def test_empty_store(self):
        stats = dashboard_stats()

        assert stats == {
            "total_orders": 0,
            "today_orders": 0,
            "total_revenue": 0,
            "today_revenue": 0,
            "total_customers": 0,
            "total_products": 0,
            "pending_orders": 0,
            "low_stock_products": 0,
        }

    def test_counts_and_revenue(self, checkout, admin_id, create_product):
        checkout()
        paid_id = checkout(paid=True)
        create_product(name="Saffron 1g", stock=3)
        hidden = create_product(name="Old Stock", stock=1)
        current_domain.process(DeactivateProduct(product_id=hidden), asynchronous=False)

        stats = dashboard_stats()

        assert stats["total_orders"] == 2
        assert stats["today_orders"] == 2
        assert stats["total_revenue"] == 130.0
        assert stats["today_revenue"] == 130.0
        assert stats["total_customers"] == 1
        assert stats["total_products"] == 2
        assert stats["pending_orders"] == 2
        assert stats["low_stock_products"] == 1

        _backdate(paid_id, datetime.now() - timedelta(days=2))
        stats = dashboard_stats()
        assert stats["today_orders"] == 1
        assert stats["today_revenue"] == 0
        assert stats["total_revenue"] == 130.0

    def test_unpaid_orders_earn_no_revenue(self, checkout):
        checkout()

        assert dashboard_stats()["total_revenue"] == 0


class TestSalesGraph:
    def test_daily_buckets_for_paid_orders(self, checkout):
        now = datetime.now()
        checkout()
        checkout(paid=True)
        older = checkout(paid=True)
        _backdate(older, now - timedelta(days=3))
        stale = checkout(paid=True)
        _backdate(stale, now - timedelta(days=40))

        graph = sales_graph("7days", now=now)

        assert graph == [
            {"date": (now - timedelta(days=3)).strftime("%Y-%m-%d"), "orders": 1, "revenue": 130.0},
            {"date": now.strftime("%Y-%m-%d"), "orders": 1, "revenue": 130.0},
        ]
        assert len(sales_graph("30days", now=now)) == 2

    def test_monthly_buckets(self, checkout):
        now = datetime.now()
        checkout(paid=True)
        earlier = checkout(paid=True)
        _backdate(earlier, now - timedelta(days=40))
        ancient = checkout(paid=True)
        _backdate(ancient, now - timedelta(days=400))

        graph = sales_graph("12months", now=now)

        assert [point["date"] for point in graph] == [
            (now - timedelta(days=40)).strftime("%Y-%m"),
            now.strftime("%Y-%m"),
        ]
        assert [point["orders"] for point in graph] == [1, 1]

    def test_leap_day_looks_back_to_february_28th(self, checkout):
        order_id = checkout(paid=True)
        _backdate(order_id, datetime(2023, 2, 28, 12, 0))

        graph = sales_graph("12months", now=datetime(2024, 2, 29, 9, 0))

        assert graph == [{"date": "2023-02", "orders": 1, "revenue": 130.0}]

    def test_unknown_period(self):
        with pytest.raises(ValidationError) as exc:
            sales_graph("fortnight")

        assert exc.value.messages["period"] == ["Unknown period 'fortnight'"]
