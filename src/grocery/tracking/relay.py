"""Relays domain events to the live tracking channel of each order."""

from protean import handle

from grocery.delivery.agent import DeliveryAgent
from grocery.delivery.events import AgentLocationUpdated
from grocery.domain import grocery
from grocery.order.events import OrderStatusChanged
from grocery.order.order import Order
from grocery.tracking import get_hub


@grocery.event_handler(part_of=Order, stream_category="grocery::order")
class OrderStatusRelay:
    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        get_hub().publish(
            str(event.order_id),
            "status-updated",
            {
                "order_number": event.order_number,
                "status": event.status,
                "previous_status": event.previous_status,
                "note": event.note,
                "changed_at": event.changed_at.isoformat() if event.changed_at else None,
            },
        )


@grocery.event_handler(part_of=DeliveryAgent, stream_category="grocery::delivery_agent")
class AgentLocationRelay:
    @handle(AgentLocationUpdated)
    def on_location_updated(self, event: AgentLocationUpdated) -> None:
        if not event.current_order_id:
            return
        get_hub().publish(
            str(event.current_order_id),
            "location-updated",
            {
                "agent_id": str(event.agent_id),
                "latitude": event.latitude,
                "longitude": event.longitude,
                "reported_at": event.reported_at.isoformat() if event.reported_at else None,
            },
        )
