"""Application tests for cart line commands."""

import pytest
from grocery.cart.items import AddToCart, ClearCart, RemoveCartItem, UpdateCartItem
from grocery.cart.queries import find_cart
from grocery.catalogue.product_management import DeactivateProduct
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def test_adding_twice_merges_into_one_line(customer_id, product_id, fill_cart):
    fill_cart(customer_id, product_id, quantity=2)
    fill_cart(customer_id, product_id, quantity=3)

    cart = find_cart(customer_id)
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 5
    assert cart.subtotal == 500.0


def test_variant_lines_use_variant_price(customer_id, create_product, fill_cart):
    product = create_product(
        name="Atta",
        price=60.0,
        variants='[{"name": "Weight", "value": "5kg", "price": 270.0, "stock": 10}]',
    )
    fill_cart(customer_id, product, quantity=1, variant_name="Weight", variant_value="5kg")

    cart = find_cart(customer_id)
    assert cart.items[0].variant_price == 270.0
    assert cart.subtotal == 270.0


def test_unknown_variant_is_rejected(customer_id, product_id, fill_cart):
    with pytest.raises(ValidationError) as exc:
        fill_cart(customer_id, product_id, variant_name="Weight", variant_value="10kg")
    assert "variant" in exc.value.messages


def test_cannot_add_more_than_stock(customer_id, create_product, fill_cart):
    product = create_product(name="Ghee 1L", price=550.0, stock=3)
    fill_cart(customer_id, product, quantity=2)

    with pytest.raises(ValidationError) as exc:
        fill_cart(customer_id, product, quantity=2)
    assert exc.value.messages["stock"] == ["Insufficient stock"]
    assert find_cart(customer_id).items[0].quantity == 2


def test_inactive_product_cannot_be_added(customer_id, product_id):
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    with pytest.raises(ObjectNotFoundError):
        current_domain.process(AddToCart(customer_id=customer_id, product_id=product_id), asynchronous=False)


def test_update_to_zero_removes_line(customer_id, product_id, fill_cart):
    item_id = fill_cart(customer_id, product_id, quantity=2)
    current_domain.process(
        UpdateCartItem(customer_id=customer_id, item_id=item_id, quantity=0),
        asynchronous=False,
    )
    assert find_cart(customer_id).is_empty


def test_update_respects_stock(customer_id, product_id, fill_cart):
    item_id = fill_cart(customer_id, product_id, quantity=2)
    with pytest.raises(ValidationError):
        current_domain.process(
            UpdateCartItem(customer_id=customer_id, item_id=item_id, quantity=51),
            asynchronous=False,
        )


def test_remove_unknown_item(customer_id, product_id, fill_cart):
    fill_cart(customer_id, product_id)
    with pytest.raises(ObjectNotFoundError):
        current_domain.process(RemoveCartItem(customer_id=customer_id, item_id="missing"), asynchronous=False)


def test_clear_cart(customer_id, product_id, fill_cart):
    fill_cart(customer_id, product_id, quantity=2)
    current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False)
    assert find_cart(customer_id).is_empty
