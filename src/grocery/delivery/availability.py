"""Agent shift controls: going online/offline and reporting location."""

from protean import handle
from protean.fields import Float, Identifier
from protean.utils.globals import current_domain

from grocery.delivery.agent import DeliveryAgent
from grocery.delivery.queries import agent_for_user
from grocery.domain import grocery


@grocery.command(part_of="DeliveryAgent")
class ToggleAvailability:
    user_id: Identifier(required=True)


@grocery.command(part_of="DeliveryAgent")
class UpdateAgentLocation:
    user_id: Identifier(required=True)
    latitude: Float(required=True, min_value=-90.0, max_value=90.0)
    longitude: Float(required=True, min_value=-180.0, max_value=180.0)


@grocery.command_handler(part_of=DeliveryAgent)
class AgentShiftHandler:
    @handle(ToggleAvailability)
    def toggle_availability(self, command):
        agent = agent_for_user(command.user_id)
        agent.toggle_availability()
        current_domain.repository_for(DeliveryAgent).add(agent)
        return agent.is_online

    @handle(UpdateAgentLocation)
    def update_location(self, command):
        agent = agent_for_user(command.user_id)
        agent.update_location(command.latitude, command.longitude)
        current_domain.repository_for(DeliveryAgent).add(agent)
