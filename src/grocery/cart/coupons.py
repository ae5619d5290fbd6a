"""Applying and removing the cart coupon."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from grocery.cart.cart import Cart
from grocery.cart.queries import cart_for_customer
from grocery.coupon.queries import find_coupon
from grocery.domain import grocery

logger = structlog.get_logger(__name__)


@grocery.command(part_of="Cart")
class ApplyCartCoupon:
    customer_id = Identifier(required=True)
    code = String(required=True, max_length=30)


@grocery.command(part_of="Cart")
class RemoveCartCoupon:
    customer_id = Identifier(required=True)


@grocery.command_handler(part_of=Cart)
class CartCouponHandler:
    @handle(ApplyCartCoupon)
    def apply_coupon(self, command):
        """Validate the coupon against the current subtotal and store the discount.

        A rejected coupon leaves the cart untouched.
        """
        cart = cart_for_customer(command.customer_id)
        if cart.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        coupon = find_coupon(command.code)
        discount = coupon.ensure_applicable(command.customer_id, cart.subtotal)

        cart.apply_coupon(coupon.id, coupon.code, discount)
        current_domain.repository_for(Cart).add(cart)
        logger.info("coupon applied to cart", customer_id=str(command.customer_id), code=coupon.code, discount=discount)
        return discount

    @handle(RemoveCartCoupon)
    def remove_coupon(self, command):
        cart = cart_for_customer(command.customer_id)
        cart.remove_coupon()
        current_domain.repository_for(Cart).add(cart)
