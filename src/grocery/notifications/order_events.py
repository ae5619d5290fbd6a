"""Customer notifications raised by order events."""

import structlog
from protean import handle

from grocery.domain import grocery
from grocery.notifications import messages
from grocery.notifications.dispatch import notify_customer
from grocery.notifications.notification import Notification, NotificationType
from grocery.order.events import OrderPlaced, OrderStatusChanged, PaymentConfirmed

logger = structlog.get_logger(__name__)


@grocery.event_handler(part_of=Notification, stream_category="grocery::order")
class OrderNotificationsHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        title, body = messages.order_placed(event.order_number, event.total_amount)
        notify_customer(
            event.customer_id,
            title,
            body,
            NotificationType.ORDER.value,
            {"order_id": str(event.order_id), "order_number": event.order_number},
        )

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        message = messages.order_status(event.order_number, event.status)
        if message is None:
            return
        title, body = message
        notify_customer(
            event.customer_id,
            title,
            body,
            NotificationType.ORDER.value,
            {"order_id": str(event.order_id), "order_number": event.order_number, "status": event.status},
        )

    @handle(PaymentConfirmed)
    def on_payment_confirmed(self, event: PaymentConfirmed) -> None:
        title, body = messages.payment_received(event.order_number, event.amount)
        notify_customer(
            event.customer_id,
            title,
            body,
            NotificationType.ORDER.value,
            {"order_id": str(event.order_id), "payment_id": event.payment_id},
        )
