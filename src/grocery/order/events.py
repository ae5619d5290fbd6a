"""Domain events for the Order aggregate.

Consumed in-process by the notification writer and the tracking relay.
"""

from protean.fields import DateTime, Float, Identifier, String

from grocery.domain import grocery


@grocery.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    total_amount = Float(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@grocery.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along the lifecycle."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    note = String()
    delivery_agent_id = Identifier()
    changed_at = DateTime(required=True)


@grocery.event(part_of="Order")
class PaymentConfirmed:
    """Payment for an order was captured (online gateway or cash on delivery)."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    payment_method = String(required=True)
    payment_id = String()
    confirmed_at = DateTime(required=True)
