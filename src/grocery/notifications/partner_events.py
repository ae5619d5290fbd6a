"""Notifies applicants when their delivery-partner application is reviewed."""

from protean import handle

from grocery.delivery.events import PartnerApplicationReviewed
from grocery.domain import grocery
from grocery.notifications import messages
from grocery.notifications.dispatch import notify_customer
from grocery.notifications.notification import Notification, NotificationType


@grocery.event_handler(part_of=Notification, stream_category="grocery::delivery_agent")
class PartnerNotificationsHandler:
    @handle(PartnerApplicationReviewed)
    def on_application_reviewed(self, event: PartnerApplicationReviewed) -> None:
        title, body = messages.partner_application(event.application_status)
        notify_customer(
            event.user_id,
            title,
            body,
            NotificationType.DELIVERY.value,
            {"agent_id": str(event.agent_id), "application_status": event.application_status},
        )
