"""Notification aggregate: an in-app message for one customer or for everyone."""

import json
from datetime import datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text

from grocery.domain import grocery


class NotificationType(Enum):
    ORDER = "order"
    OFFER = "offer"
    PROMOTION = "promotion"
    SYSTEM = "system"
    DELIVERY = "delivery"


@grocery.aggregate
class Notification:
    """A message shown in the customer's notification feed.

    Broadcasts carry no ``user_id`` and appear in every customer's feed.
    """

    user_id: Identifier()
    title: String(required=True, max_length=200, sanitize=False)
    body: Text(required=True)
    notification_type: String(choices=NotificationType, default=NotificationType.SYSTEM.value)
    data: Text(sanitize=False)  # JSON object
    image: String(max_length=500)
    is_read: Boolean(default=False)
    is_broadcast: Boolean(default=False)
    sent_at: DateTime(default=datetime.now)

    @classmethod
    def send(cls, title, body, notification_type=None, user_id=None, data=None, image=None, is_broadcast=False):
        if not is_broadcast and user_id is None:
            raise ValidationError({"user_id": ["A recipient is required unless the notification is a broadcast"]})
        return cls(
            user_id=None if is_broadcast else user_id,
            title=title,
            body=body,
            notification_type=notification_type or NotificationType.SYSTEM.value,
            data=json.dumps(data or {}),
            image=image,
            is_broadcast=is_broadcast,
            sent_at=datetime.now(),
        )

    def is_visible_to(self, user_id) -> bool:
        return self.is_broadcast or str(self.user_id) == str(user_id)

    def mark_read(self):
        self.is_read = True

    @property
    def payload(self) -> dict:
        return json.loads(self.data) if self.data else {}
