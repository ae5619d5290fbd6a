"""Notification feed for customers and admin sends."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from grocery.api.auth import Principal, current_principal, require_admin
from grocery.api.envelope import ok
from grocery.api.schemas import (
    Envelope,
    MessageResponse,
    NotificationCreated,
    NotificationFeed,
    NotificationOut,
    SendNotificationRequest,
)
from grocery.notifications.dispatch import MarkAllNotificationsRead, MarkNotificationRead, SendNotification
from grocery.notifications.queries import notifications_for, unread_count

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=Envelope[NotificationFeed])
async def my_notifications(principal: Principal = Depends(current_principal)):
    feed = NotificationFeed(
        notifications=[NotificationOut.model_validate(n) for n in notifications_for(principal.id)],
        unread=unread_count(principal.id),
    )
    return ok(feed)


@router.put("/read-all", response_model=MessageResponse)
async def mark_all_read(principal: Principal = Depends(current_principal)):
    current_domain.process(MarkAllNotificationsRead(user_id=principal.id), asynchronous=False)
    return ok(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(notification_id: str, principal: Principal = Depends(current_principal)):
    command = MarkNotificationRead(notification_id=notification_id, user_id=principal.id)
    current_domain.process(command, asynchronous=False)
    return ok(message="Notification marked as read")


@router.post("/send", status_code=201, response_model=Envelope[NotificationCreated], dependencies=[Depends(require_admin)])
async def send_notification(body: SendNotificationRequest):
    command = SendNotification(
        title=body.title,
        body=body.body,
        notification_type=body.type,
        user_id=body.user_id,
        image=body.image,
        is_broadcast=body.is_broadcast,
    )
    notification_id = current_domain.process(command, asynchronous=False)
    return ok(NotificationCreated(notification_id=notification_id), "Notification sent")
