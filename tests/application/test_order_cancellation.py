"""Application tests for customer cancellation and reorder."""

import pytest
from grocery.cart.queries import find_cart
from grocery.cart.reorder import Reorder
from grocery.catalogue.product import Product
from grocery.catalogue.product_management import DeactivateProduct
from grocery.identity.customer import Customer
from grocery.loyalty.bonus import GrantBonusPoints
from grocery.loyalty.ledger import loyalty_history
from grocery.order.cancellation import CancelOrder
from grocery.order.order import Order, OrderStatus
from grocery.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import InvalidOperationError, ObjectNotFoundError


@pytest.fixture()
def order_id(customer_id, address_id, product_id, fill_cart, place_order):
    current_domain.process(GrantBonusPoints(customer_id=customer_id, points=40), asynchronous=False)
    fill_cart(customer_id, product_id, quantity=2)
    return place_order(customer_id, address_id, loyalty_points_to_use=40)


class TestCancelOrder:
    def test_cancel_restores_stock_and_points(self, customer_id, product_id, order_id):
        current_domain.process(
            CancelOrder(order_id=order_id, customer_id=customer_id, reason="Ordered twice"),
            asynchronous=False,
        )

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancel_reason == "Ordered twice"
        assert order.status_history[-1].status == OrderStatus.CANCELLED.value

        product = current_domain.repository_for(Product).get(product_id)
        assert product.stock == 50
        assert product.total_sold == 0

        entries = loyalty_history(customer_id)
        assert "refunded" in [e.entry_type for e in entries]
        customer = current_domain.repository_for(Customer).get(customer_id)
        # 40 bonus - 40 redeemed + 22 earned on ₹226 + 40 refunded; earned points stay
        assert customer.loyalty_points == 62

    def test_only_owner_can_cancel(self, register_customer, order_id):
        stranger = register_customer(name="Someone Else")
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                CancelOrder(order_id=order_id, customer_id=stranger, reason="Not mine"),
                asynchronous=False,
            )

    def test_preparing_order_cannot_be_cancelled(self, customer_id, order_id):
        for status in ("confirmed", "preparing"):
            current_domain.process(UpdateOrderStatus(order_id=order_id, status=status), asynchronous=False)

        with pytest.raises(InvalidOperationError):
            current_domain.process(
                CancelOrder(order_id=order_id, customer_id=customer_id, reason="Too slow"),
                asynchronous=False,
            )

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.PREPARING.value

    def test_missing_product_is_skipped(self, customer_id, product_id, order_id):
        product_repo = current_domain.repository_for(Product)
        product_repo._dao.delete(product_repo.get(product_id))

        current_domain.process(CancelOrder(order_id=order_id, customer_id=customer_id), asynchronous=False)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.CANCELLED.value


class TestReorder:
    def test_reorder_refills_cart(self, customer_id, product_id, order_id):
        copied = current_domain.process(Reorder(customer_id=customer_id, order_id=order_id), asynchronous=False)

        assert copied == 1
        cart = find_cart(customer_id)
        assert cart.items[0].quantity == 2
        assert str(cart.items[0].product_id) == str(product_id)

    def test_reorder_skips_inactive_products(self, customer_id, product_id, order_id):
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)

        copied = current_domain.process(Reorder(customer_id=customer_id, order_id=order_id), asynchronous=False)

        assert copied == 0
        assert find_cart(customer_id).is_empty

    def test_reorder_caps_at_stock(self, customer_id, product_id, order_id):
        product_repo = current_domain.repository_for(Product)
        product = product_repo.get(product_id)
        product.stock = 1
        product_repo.add(product)

        current_domain.process(Reorder(customer_id=customer_id, order_id=order_id), asynchronous=False)

        assert find_cart(customer_id).items[0].quantity == 1
