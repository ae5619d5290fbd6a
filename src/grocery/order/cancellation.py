"""Order cancellation: customer-initiated, with stock and points released."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from grocery.catalogue.product import Product
from grocery.domain import grocery
from grocery.identity.customer import Customer
from grocery.loyalty.ledger import refund_points
from grocery.order.order import Order

logger = structlog.get_logger(__name__)


@grocery.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


def cancel_and_release(order, reason=None):
    """Cancel ``order`` and undo what checkout took.

    Every line's quantity goes back to stock (products deleted since are
    skipped) and redeemed loyalty points are credited back to the customer.
    """
    order.cancel(reason)

    product_repo = current_domain.repository_for(Product)
    for item in order.items:
        try:
            product = product_repo.get(item.product_id)
        except ObjectNotFoundError:
            logger.warning("cancelled line product missing", order_id=str(order.id), product_id=str(item.product_id))
            continue
        product.restore_stock(item.quantity)
        product_repo.add(product)

    if order.loyalty_points_used:
        customer_repo = current_domain.repository_for(Customer)
        customer = customer_repo.get(order.customer_id)
        refund_points(customer, order.id, order.loyalty_points_used)
        customer_repo.add(customer)

    logger.info("order cancelled", order_id=str(order.id), order_number=order.order_number, reason=reason)


@grocery.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order_repo = current_domain.repository_for(Order)
        try:
            order = order_repo.get(command.order_id)
        except ObjectNotFoundError:
            order = None
        if order is None or not order.belongs_to(command.customer_id):
            raise ObjectNotFoundError("Order not found")

        cancel_and_release(order, command.reason)
        order_repo.add(order)
