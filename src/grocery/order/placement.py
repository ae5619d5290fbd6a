"""Checkout: turn the customer's cart into an order.

Everything runs in the command handler's unit of work: the order insert,
the stock withdrawals, the loyalty postings, the coupon usage and the cart
reset either all commit or none do.
"""

from collections import defaultdict

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from grocery.cart.cart import Cart
from grocery.cart.queries import find_cart
from grocery.catalogue.product import Product
from grocery.coupon.coupon import Coupon
from grocery.domain import grocery
from grocery.identity.customer import Customer
from grocery.loyalty.ledger import grant_points, redeem_points
from grocery.order.number import unique_order_number
from grocery.order.order import DeliveryAddress, Order, PaymentMethod

logger = structlog.get_logger(__name__)


@grocery.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    address_id = Identifier(required=True)
    payment_method = String(required=True, choices=PaymentMethod)
    loyalty_points_to_use = Integer(default=0, min_value=0)
    notes = Text()


def _snapshot_address(address) -> DeliveryAddress:
    return DeliveryAddress(
        full_name=address.full_name,
        phone=address.phone,
        address_line1=address.address_line1,
        address_line2=address.address_line2,
        landmark=address.landmark,
        city=address.city,
        state=address.state,
        pincode=address.pincode,
        latitude=address.location.latitude if address.location else None,
        longitude=address.location.longitude if address.location else None,
    )


def _order_number_taken(number) -> bool:
    return bool(current_domain.repository_for(Order)._dao.query.filter(order_number=number).all().items)


def _price_lines(cart):
    """Re-read every product and price each cart line.

    Returns the priced lines and the loaded products keyed by id. Raises when
    a product is gone, inactive, or short of stock for the combined quantity
    of all lines that reference it.
    """
    product_repo = current_domain.repository_for(Product)
    products = {}
    requested = defaultdict(int)
    lines = []

    for item in cart.items:
        key = str(item.product_id)
        if key not in products:
            try:
                products[key] = product_repo.get(item.product_id)
            except ObjectNotFoundError:
                raise ValidationError({"product": ['Product "Unknown" is no longer available']}) from None

        product = products[key]
        requested[key] += item.quantity
        product.ensure_available(requested[key])

        lines.append(
            {
                "product_id": product.id,
                "name": product.name,
                "image": product.primary_image,
                "variant_name": item.variant_name,
                "variant_value": item.variant_value,
                "variant_price": item.variant_price,
                "price": item.variant_price or product.price,
                "quantity": item.quantity,
            }
        )
    return lines, products


@grocery.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = find_cart(command.customer_id)
        if cart is None or cart.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        customer_repo = current_domain.repository_for(Customer)
        customer = customer_repo.get(command.customer_id)
        address = customer.find_address(command.address_id)
        if address is None:
            raise ObjectNotFoundError("Address not found")

        lines, products = _price_lines(cart)
        subtotal = round(sum(line["price"] * line["quantity"] for line in lines), 2)

        coupon = None
        coupon_discount = 0.0
        if cart.coupon_id:
            coupon_repo = current_domain.repository_for(Coupon)
            coupon = coupon_repo.get(cart.coupon_id)
            coupon_discount = coupon.ensure_applicable(command.customer_id, subtotal)

        points_used = min(command.loyalty_points_to_use or 0, customer.loyalty_points)

        order = Order.place(
            order_number=unique_order_number(_order_number_taken),
            customer_id=customer.id,
            lines=lines,
            delivery_address=_snapshot_address(address),
            payment_method=command.payment_method,
            coupon_id=coupon.id if coupon else None,
            coupon_code=coupon.code if coupon else None,
            coupon_discount=coupon_discount,
            loyalty_points_used=points_used,
            notes=command.notes,
        )

        product_repo = current_domain.repository_for(Product)
        for line in lines:
            products[str(line["product_id"])].withdraw_stock(line["quantity"])
        for product in products.values():
            product_repo.add(product)

        if points_used:
            redeem_points(customer, order.id, order.order_number, points_used)

        if coupon is not None:
            coupon.record_usage(customer.id, order.id, subtotal)
            coupon_repo.add(coupon)

        cart.clear()
        current_domain.repository_for(Cart).add(cart)

        if order.is_cash_on_delivery:
            grant_points(customer, order.id, order.order_number, order.total_amount)

        customer_repo.add(customer)
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(customer.id),
            total_amount=order.total_amount,
            payment_method=order.payment_method,
        )
        return str(order.id)
