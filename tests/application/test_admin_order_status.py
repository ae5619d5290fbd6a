"""Application tests for back-office status changes and online payments."""

import pytest
from grocery.catalogue.product import Product
from grocery.identity.customer import Customer
from grocery.order.order import Order, OrderStatus, PaymentStatus
from grocery.order.payment import ConfirmPayment, RecordPaymentFailure
from grocery.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import InvalidOperationError, ValidationError


@pytest.fixture()
def order_id(customer_id, address_id, product_id, fill_cart, place_order):
    fill_cart(customer_id, product_id, quantity=2)
    return place_order(customer_id, address_id)


def _update(order_id, status, note=None):
    return current_domain.process(UpdateOrderStatus(order_id=order_id, status=status, note=note), asynchronous=False)


class TestUpdateOrderStatus:
    def test_confirm_records_note(self, order_id):
        assert _update(order_id, "confirmed", "Packed by store") == "confirmed"

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status_history[-1].note == "Packed by store"

    def test_placed_to_delivered_is_rejected(self, order_id):
        with pytest.raises(InvalidOperationError) as exc:
            _update(order_id, "delivered")
        assert "Cannot transition from placed to delivered" in str(exc.value)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.PLACED.value
        assert len(order.status_history) == 1

    def test_unknown_status_is_rejected(self, order_id):
        with pytest.raises(ValidationError) as exc:
            _update(order_id, "lost")
        assert exc.value.messages["status"] == ["Invalid status"]

    def test_admin_cancel_releases_stock(self, order_id, product_id):
        _update(order_id, "confirmed")
        _update(order_id, "cancelled", "Out of delivery zone")

        assert current_domain.repository_for(Product).get(product_id).stock == 50
        order = current_domain.repository_for(Order).get(order_id)
        assert order.cancel_reason == "Out of delivery zone"

    def test_refund_after_cancel(self, order_id):
        _update(order_id, "cancelled")
        _update(order_id, "refunded")
        assert current_domain.repository_for(Order).get(order_id).status == OrderStatus.REFUNDED.value


class TestOnlinePayment:
    @pytest.fixture()
    def online_order_id(self, customer_id, address_id, product_id, fill_cart, place_order):
        fill_cart(customer_id, product_id, quantity=2)
        return place_order(customer_id, address_id, payment_method="razorpay")

    def test_confirmation_marks_paid_and_grants_points(self, customer_id, online_order_id):
        current_domain.process(ConfirmPayment(order_id=online_order_id, payment_id="pay_abc"), asynchronous=False)

        order = current_domain.repository_for(Order).get(online_order_id)
        assert order.payment_status == PaymentStatus.PAID.value
        assert order.payment_id == "pay_abc"
        assert current_domain.repository_for(Customer).get(customer_id).loyalty_points == 23

    def test_failure_is_recorded(self, online_order_id):
        current_domain.process(RecordPaymentFailure(order_id=online_order_id), asynchronous=False)
        order = current_domain.repository_for(Order).get(online_order_id)
        assert order.payment_status == PaymentStatus.FAILED.value

    def test_double_confirmation_is_rejected(self, online_order_id):
        current_domain.process(ConfirmPayment(order_id=online_order_id, payment_id="pay_abc"), asynchronous=False)
        with pytest.raises(InvalidOperationError):
            current_domain.process(ConfirmPayment(order_id=online_order_id, payment_id="pay_abc"), asynchronous=False)
