"""Agent-reported delivery progress and delivery completion."""

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from grocery.delivery.agent import DeliveryAgent
from grocery.delivery.queries import agent_for_user
from grocery.domain import grocery
from grocery.order.order import AGENT_REPORTABLE_STATES, Order, OrderStatus

logger = structlog.get_logger(__name__)


@grocery.command(part_of="Order")
class UpdateDeliveryStatus:
    agent_user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    otp = String(max_length=10)
    note = String(max_length=500)


@grocery.command(part_of="Order")
class CompleteDelivery:
    agent_user_id = Identifier(required=True)
    otp = String(max_length=10)
    note = String(max_length=500)


def settle_delivery(order, otp=None, note=None, verify_otp=True):
    """Deliver ``order`` and free its agent.

    The agent is credited with the per-delivery fee and becomes available
    again if still online. Both aggregates are registered with the current
    unit of work.
    """
    if verify_otp:
        order.deliver(otp, note)
    else:
        order.deliver_without_otp(note)

    if order.delivery_agent_id is not None:
        agent_repo = current_domain.repository_for(DeliveryAgent)
        agent = agent_repo.get(order.delivery_agent_id)
        if str(agent.current_order_id) == str(order.id):
            agent.finish_delivery()
            agent_repo.add(agent)

    logger.info("order delivered", order_id=str(order.id), agent_id=str(order.delivery_agent_id))


def _order_for_agent(order_id, agent):
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        order = None
    if order is None or not order.is_assigned_to(agent.id):
        raise ObjectNotFoundError("Order not found or not assigned to you")
    return order


@grocery.command_handler(part_of=Order)
class DeliveryProgressHandler:
    @handle(UpdateDeliveryStatus)
    def update_delivery_status(self, command):
        agent = agent_for_user(command.agent_user_id)
        order = _order_for_agent(command.order_id, agent)

        target = OrderStatus(command.status)
        if target not in AGENT_REPORTABLE_STATES:
            raise InvalidOperationError("Invalid status update")

        if target == OrderStatus.PICKED_UP:
            order.mark_picked_up(command.note)
        elif target == OrderStatus.ARRIVED:
            order.mark_arrived(command.note)
        else:
            settle_delivery(order, command.otp, command.note)

        current_domain.repository_for(Order).add(order)
        return order.status

    @handle(CompleteDelivery)
    def complete_delivery(self, command):
        agent = agent_for_user(command.agent_user_id)
        if not agent.is_busy:
            raise ObjectNotFoundError("No active delivery")

        order = _order_for_agent(agent.current_order_id, agent)
        settle_delivery(order, command.otp, command.note)
        current_domain.repository_for(Order).add(order)
        return str(order.id)
