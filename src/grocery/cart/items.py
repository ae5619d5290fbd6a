"""Cart line management: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from grocery.cart.cart import Cart
from grocery.cart.queries import cart_for_customer
from grocery.catalogue.product import Product
from grocery.domain import grocery


@grocery.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)
    variant_name = String(max_length=50, sanitize=False)
    variant_value = String(max_length=50, sanitize=False)


@grocery.command(part_of="Cart")
class UpdateCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@grocery.command(part_of="Cart")
class RemoveCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)


@grocery.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


def load_active_product(product_id) -> Product:
    try:
        product = current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        product = None
    if product is None or not product.is_active:
        raise ObjectNotFoundError("Product not found")
    return product


def _existing_cart(customer_id) -> Cart:
    cart = cart_for_customer(customer_id)
    if cart.is_empty:
        raise ObjectNotFoundError("Item not found in cart")
    return cart


@grocery.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = load_active_product(command.product_id)

        variant = None
        if command.variant_name or command.variant_value:
            variant = product.find_variant(command.variant_name, command.variant_value)
            if variant is None:
                raise ValidationError({"variant": ["Variant not found for this product"]})

        cart = cart_for_customer(command.customer_id)
        item = cart.add_item(
            product_id=product.id,
            quantity=command.quantity,
            price=product.price,
            variant_name=variant.name if variant else None,
            variant_value=variant.value if variant else None,
            variant_price=variant.price if variant else None,
        )
        if product.stock < item.quantity:
            raise ValidationError({"stock": ["Insufficient stock"]})

        current_domain.repository_for(Cart).add(cart)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = _existing_cart(command.customer_id)
        item = cart.find_item(command.item_id)
        if item is None:
            raise ObjectNotFoundError("Item not found in cart")

        if command.quantity > 0:
            product = load_active_product(item.product_id)
            if product.stock < command.quantity:
                raise ValidationError({"stock": ["Insufficient stock"]})

        cart.update_item(command.item_id, command.quantity)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        cart = _existing_cart(command.customer_id)
        if cart.find_item(command.item_id) is None:
            raise ObjectNotFoundError("Item not found in cart")
        cart.remove_item(command.item_id)
        current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = cart_for_customer(command.customer_id)
        cart.clear()
        current_domain.repository_for(Cart).add(cart)
