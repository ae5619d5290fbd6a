"""Domain events for the DeliveryAgent aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from grocery.domain import grocery


@grocery.event(part_of="DeliveryAgent")
class AgentLocationUpdated:
    """An agent reported a new position while online."""

    __version__ = 1

    agent_id = Identifier(required=True)
    current_order_id = Identifier()
    latitude = Float(required=True)
    longitude = Float(required=True)
    reported_at = DateTime(required=True)


@grocery.event(part_of="DeliveryAgent")
class PartnerApplicationReviewed:
    """An admin approved or rejected a delivery partner application."""

    __version__ = 1

    agent_id = Identifier(required=True)
    user_id = Identifier(required=True)
    application_status = String(required=True)
    reviewed_at = DateTime(required=True)
