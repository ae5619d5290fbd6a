"""BDD tests for checkout."""

from grocery.cart.queries import find_cart
from grocery.catalogue.product import Product
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then

scenarios("features/order_placement.feature")


@given(parsers.cfparse("the product stock drops to {stock:d}"))
def _(product_id, stock):
    repo = current_domain.repository_for(Product)
    product = repo.get(product_id)
    product.stock = stock
    repo.add(product)


@then("the cart is empty")
def _(customer_id):
    assert find_cart(customer_id).is_empty
