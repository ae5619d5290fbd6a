"""Creating and sending notifications."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from grocery.domain import grocery
from grocery.notifications.notification import Notification, NotificationType
from grocery.notifications.queries import get_notification_for

logger = structlog.get_logger(__name__)


def notify_customer(user_id, title, body, notification_type, data=None) -> Notification:
    notification = Notification.send(
        title=title,
        body=body,
        notification_type=notification_type,
        user_id=user_id,
        data=data,
    )
    current_domain.repository_for(Notification).add(notification)
    logger.info("notification sent", user_id=str(user_id), notification_type=notification_type, title=title)
    return notification


@grocery.command(part_of="Notification")
class SendNotification:
    title: String(required=True, max_length=200, sanitize=False)
    body: Text(required=True)
    notification_type: String(choices=NotificationType, default=NotificationType.SYSTEM.value)
    user_id: Identifier()
    image: String(max_length=500)
    is_broadcast: Boolean(default=False)


@grocery.command(part_of="Notification")
class MarkNotificationRead:
    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)


@grocery.command(part_of="Notification")
class MarkAllNotificationsRead:
    user_id: Identifier(required=True)


@grocery.command_handler(part_of=Notification)
class NotificationCommandsHandler:
    @handle(SendNotification)
    def send_notification(self, command):
        notification = Notification.send(
            title=command.title,
            body=command.body,
            notification_type=command.notification_type,
            user_id=command.user_id,
            image=command.image,
            is_broadcast=command.is_broadcast,
        )
        current_domain.repository_for(Notification).add(notification)
        logger.info(
            "notification sent",
            notification_id=str(notification.id),
            is_broadcast=notification.is_broadcast,
            title=notification.title,
        )
        return str(notification.id)

    @handle(MarkNotificationRead)
    def mark_read(self, command):
        notification = get_notification_for(command.user_id, command.notification_id)
        notification.mark_read()
        current_domain.repository_for(Notification).add(notification)

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command):
        repo = current_domain.repository_for(Notification)
        unread = repo._dao.query.filter(user_id=command.user_id, is_read=False).all().items
        for notification in unread:
            notification.mark_read()
            repo.add(notification)
        return len(unread)
