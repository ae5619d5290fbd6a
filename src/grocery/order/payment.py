"""Online payment outcomes reported by the payment gateway callback."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from grocery.domain import grocery
from grocery.identity.customer import Customer
from grocery.loyalty.ledger import grant_points
from grocery.order.order import Order

logger = structlog.get_logger(__name__)


@grocery.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    payment_id = String(max_length=100)


@grocery.command(part_of="Order")
class RecordPaymentFailure:
    order_id = Identifier(required=True)


@grocery.command_handler(part_of=Order)
class PaymentHandler:
    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        order.record_payment(command.payment_id)

        # Cash-on-delivery orders earn their points at checkout
        if not order.is_cash_on_delivery:
            customer_repo = current_domain.repository_for(Customer)
            customer = customer_repo.get(order.customer_id)
            grant_points(customer, order.id, order.order_number, order.total_amount)
            customer_repo.add(customer)

        order_repo.add(order)
        logger.info("payment confirmed", order_id=str(order.id), payment_id=command.payment_id)

    @handle(RecordPaymentFailure)
    def record_failure(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        order.record_payment_failure()
        order_repo.add(order)
        logger.warning("payment failed", order_id=str(order.id))
