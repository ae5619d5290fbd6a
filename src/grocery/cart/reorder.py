"""Reorder: refill the cart from a past order."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from grocery.cart.cart import Cart
from grocery.cart.queries import cart_for_customer
from grocery.catalogue.product import Product
from grocery.domain import grocery
from grocery.order.queries import customer_order

logger = structlog.get_logger(__name__)


@grocery.command(part_of="Cart")
class Reorder:
    customer_id = Identifier(required=True)
    order_id = Identifier(required=True)


@grocery.command_handler(part_of=Cart)
class ReorderHandler:
    @handle(Reorder)
    def reorder(self, command):
        """Copy the order's lines into the cart at today's prices.

        Inactive, deleted and sold-out products are skipped. Quantities are
        capped at the stock on hand. Returns the number of lines copied.
        """
        order = customer_order(command.customer_id, command.order_id)
        cart = cart_for_customer(command.customer_id)
        product_repo = current_domain.repository_for(Product)

        copied = 0
        for item in order.items:
            try:
                product = product_repo.get(item.product_id)
            except ObjectNotFoundError:
                continue
            if not product.is_active or product.stock <= 0:
                continue

            variant = product.find_variant(item.variant_name, item.variant_value) if item.variant_name else None
            cart.set_quantity(
                product_id=product.id,
                quantity=min(item.quantity, product.stock),
                price=product.price,
                variant_name=variant.name if variant else None,
                variant_value=variant.value if variant else None,
                variant_price=variant.price if variant else None,
            )
            copied += 1

        current_domain.repository_for(Cart).add(cart)
        logger.info("order reordered", order_id=str(order.id), customer_id=str(command.customer_id), lines=copied)
        return copied
