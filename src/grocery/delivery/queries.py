"""Delivery-partner lookups and the nearby-agent search."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from grocery.delivery.agent import DeliveryAgent
from grocery.settings import NEARBY_AGENT_RADIUS_METERS


def find_agent_for_user(user_id):
    agents = current_domain.repository_for(DeliveryAgent)._dao.query.filter(user_id=user_id).all().items
    return agents[0] if agents else None


def agent_for_user(user_id) -> DeliveryAgent:
    agent = find_agent_for_user(user_id)
    if agent is None:
        raise ObjectNotFoundError("Agent registration not found")
    return agent


def get_agent(agent_id) -> DeliveryAgent:
    try:
        return current_domain.repository_for(DeliveryAgent).get(agent_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError("Agent not found") from None


def list_agents(is_available=None, is_active=None, is_online=None, application_status=None):
    filters = {
        "is_available": is_available,
        "is_active": is_active,
        "is_online": is_online,
        "application_status": application_status,
    }
    query = current_domain.repository_for(DeliveryAgent)._dao.query
    criteria = {key: value for key, value in filters.items() if value is not None}
    if criteria:
        query = query.filter(**criteria)
    return query.order_by("-created_at").all().items


def nearby_agents(latitude, longitude, max_distance=NEARBY_AGENT_RADIUS_METERS):
    """Online, available, active agents within ``max_distance`` metres, closest first.

    Returns ``(agent, distance_in_metres)`` pairs.
    """
    in_range = []
    for agent in list_agents(is_active=True, is_online=True):
        if not agent.is_dispatchable:
            continue
        distance = agent.distance_to(latitude, longitude)
        if distance is not None and distance <= max_distance:
            in_range.append((agent, distance))
    return sorted(in_range, key=lambda pair: pair[1])
