"""Back-office status changes, dispatched through the transition table."""

from protean import handle
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from grocery.delivery.progress import settle_delivery
from grocery.domain import grocery
from grocery.order.cancellation import cancel_and_release
from grocery.order.order import Order, OrderStatus, can_transition


@grocery.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = String(max_length=500)


@grocery.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        try:
            target = OrderStatus(command.status)
        except ValueError:
            raise ValidationError({"status": ["Invalid status"]}) from None

        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)

        if not can_transition(order.status, target):
            raise InvalidOperationError(f"Cannot transition from {order.status} to {target.value}")

        if target == OrderStatus.CONFIRMED:
            order.confirm(command.note)
        elif target == OrderStatus.PREPARING:
            order.start_preparing(command.note)
        elif target == OrderStatus.OUT_FOR_DELIVERY:
            raise InvalidOperationError("Assign a delivery agent to send the order out for delivery")
        elif target == OrderStatus.PICKED_UP:
            order.mark_picked_up(command.note)
        elif target == OrderStatus.ARRIVED:
            order.mark_arrived(command.note)
        elif target == OrderStatus.DELIVERED:
            settle_delivery(order, note=command.note, verify_otp=False)
        elif target == OrderStatus.CANCELLED:
            cancel_and_release(order, command.note)
        elif target == OrderStatus.REFUNDED:
            order.refund(command.note)

        order_repo.add(order)
        return order.status
