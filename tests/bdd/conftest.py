"""Shared BDD fixtures and step definitions for checkout and delivery."""

import pytest
from grocery.api.errors import first_message
from grocery.catalogue.product import Product
from grocery.delivery.agent import DeliveryAgent
from grocery.identity.customer import Customer
from grocery.loyalty.bonus import GrantBonusPoints
from grocery.order.order import Order
from grocery.order.placement import PlaceOrder
from grocery.order.status import UpdateOrderStatus
from protean import current_domain
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then, when


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the exception a When step captured."""
    return {"exc": None}


@pytest.fixture()
def attempt(error):
    """Process a command, recording a domain rejection in ``error`` instead of raising it."""

    def _attempt(command):
        try:
            return current_domain.process(command, asynchronous=False)
        except (ValidationError, InvalidOperationError, ObjectNotFoundError) as exc:
            error["exc"] = exc
            return None

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a customer with a saved address")
def _(customer_id, address_id):
    pass


@given(
    parsers.cfparse('a product "{name}" priced at {price:g} with {stock:d} in stock'),
    target_fixture="product_id",
)
def _(create_product, name, price, stock):
    return create_product(name=name, price=price, stock=stock)


@given(parsers.cfparse("the customer has {quantity:d} units of the product in the cart"))
def _(fill_cart, customer_id, product_id, quantity):
    fill_cart(customer_id, product_id, quantity=quantity)


@given(parsers.cfparse("the customer holds {points:d} loyalty points"))
def _(customer_id, points):
    current_domain.process(GrantBonusPoints(customer_id=customer_id, points=points), asynchronous=False)


@given("the customer has placed an order", target_fixture="order_id")
def _(place_order, customer_id, address_id):
    return place_order(customer_id, address_id)


@given(parsers.cfparse('the store has moved the order to "{status}"'))
def _(order_id, status):
    path = {"confirmed": ["confirmed"], "preparing": ["confirmed", "preparing"]}[status]
    for step in path:
        current_domain.process(UpdateOrderStatus(order_id=order_id, status=step), asynchronous=False)


# ---------------------------------------------------------------------------
# When steps (shared)
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer checks out paying "{method}"'), target_fixture="order_id")
def _(attempt, customer_id, address_id, method):
    return attempt(PlaceOrder(customer_id=customer_id, address_id=address_id, payment_method=method))


@when(
    parsers.cfparse('the customer checks out paying "{method}" using {points:d} points'),
    target_fixture="order_id",
)
def _(attempt, customer_id, address_id, method, points):
    return attempt(
        PlaceOrder(
            customer_id=customer_id,
            address_id=address_id,
            payment_method=method,
            loyalty_points_to_use=points,
        ),
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then(parsers.cfparse("the order total is {amount:g}"))
def _(order_id, amount):
    assert current_domain.repository_for(Order).get(order_id).total_amount == amount


@then(parsers.cfparse("the product has {stock:d} left in stock"))
def _(product_id, stock):
    assert current_domain.repository_for(Product).get(product_id).stock == stock


@then(parsers.cfparse("the customer has {points:d} loyalty points"))
def _(customer_id, points):
    assert current_domain.repository_for(Customer).get(customer_id).loyalty_points == points


@then(parsers.cfparse('the action is rejected with "{message}"'))
def _(error, message):
    assert error["exc"] is not None, "Expected the action to be rejected"
    assert first_message(error["exc"]) == message


@then(parsers.cfparse("the agent has completed {count:d} delivery"))
@then(parsers.cfparse("the agent has completed {count:d} deliveries"))
def _(agent_id, count):
    assert current_domain.repository_for(DeliveryAgent).get(agent_id).total_deliveries == count
