from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from grocery.notifications.notification import Notification


def notifications_for(user_id, limit=50):
    """The user's own notifications and all broadcasts, newest first."""
    return (
        current_domain.repository_for(Notification)
        ._dao.query.filter(Q(user_id=user_id) | Q(is_broadcast=True))
        .order_by("-sent_at")
        .limit(limit)
        .all()
        .items
    )


def unread_count(user_id) -> int:
    return current_domain.repository_for(Notification)._dao.query.filter(user_id=user_id, is_read=False).all().total


def get_notification_for(user_id, notification_id) -> Notification:
    try:
        notification = current_domain.repository_for(Notification).get(notification_id)
    except ObjectNotFoundError:
        notification = None
    if notification is None or notification.is_broadcast or str(notification.user_id) != str(user_id):
        raise ObjectNotFoundError("Notification not found")
    return notification
