"""Binding a delivery agent to a preparing order."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from grocery.delivery.agent import DeliveryAgent
from grocery.delivery.queries import get_agent
from grocery.domain import grocery
from grocery.order.order import Order

logger = structlog.get_logger(__name__)


@grocery.command(part_of="Order")
class AssignDeliveryAgent:
    order_id = Identifier(required=True)
    agent_id = Identifier(required=True)
    note = String(max_length=500)


@grocery.command_handler(part_of=Order)
class AssignDeliveryAgentHandler:
    @handle(AssignDeliveryAgent)
    def assign_agent(self, command):
        """Move the order out for delivery and claim the agent in one unit of work.

        The order must be ``preparing``. The agent must be active and free;
        an agent already carrying an order is refused.
        """
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        agent = get_agent(command.agent_id)

        order.assign_agent(agent.id, command.note)
        agent.claim_order(order.id)

        current_domain.repository_for(DeliveryAgent).add(agent)
        order_repo.add(order)
        logger.info("agent assigned", order_id=str(order.id), agent_id=str(agent.id))
