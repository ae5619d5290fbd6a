"""Application tests for notifications written from order and partner events."""

import pytest
from grocery.delivery.application import ApplyAsPartner, ReviewApplication
from grocery.notifications.dispatch import MarkAllNotificationsRead, MarkNotificationRead, SendNotification
from grocery.notifications.queries import notifications_for, unread_count
from grocery.order.status import UpdateOrderStatus
from grocery.tracking import get_hub
from protean import current_domain
from protean.exceptions import ObjectNotFoundError


@pytest.fixture()
def order_id(customer_id, address_id, product_id, fill_cart, place_order):
    fill_cart(customer_id, product_id, quantity=2)
    return place_order(customer_id, address_id)


class TestOrderNotifications:
    def test_placement_notifies_customer(self, customer_id, order_id):
        titles = [n.title for n in notifications_for(customer_id)]
        assert "Order placed" in titles

    def test_status_change_notifies_customer(self, customer_id, order_id):
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="confirmed"), asynchronous=False)

        latest = [n for n in notifications_for(customer_id) if n.title == "Order confirmed"]
        assert len(latest) == 1
        assert latest[0].payload["status"] == "confirmed"
        assert latest[0].notification_type == "order"

    def test_status_change_is_relayed_to_tracking(self, order_id):
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="confirmed"), asynchronous=False)

        published = [m for m in get_hub().published if m["order_id"] == str(order_id)]
        assert published[-1]["event"] == "status-updated"
        assert published[-1]["data"]["status"] == "confirmed"

    def test_partner_review_notifies_applicant(self, customer_id):
        agent_id = current_domain.process(ApplyAsPartner(user_id=customer_id), asynchronous=False)
        current_domain.process(ReviewApplication(agent_id=agent_id, status="approved"), asynchronous=False)

        assert "Application approved" in [n.title for n in notifications_for(customer_id)]


class TestNotificationCommands:
    def test_broadcast_reaches_every_feed(self, register_customer):
        first, second = register_customer(), register_customer(name="Vikram Rao")
        current_domain.process(
            SendNotification(title="Mango season", body="Alphonso is here", is_broadcast=True),
            asynchronous=False,
        )
        assert [n.title for n in notifications_for(first)] == ["Mango season"]
        assert [n.title for n in notifications_for(second)] == ["Mango season"]

    def test_mark_read_and_unread_count(self, customer_id):
        first = current_domain.process(
            SendNotification(title="Hi", body="Welcome", user_id=customer_id),
            asynchronous=False,
        )
        current_domain.process(SendNotification(title="Hello", body="Again", user_id=customer_id), asynchronous=False)
        assert unread_count(customer_id) == 2

        current_domain.process(MarkNotificationRead(notification_id=first, user_id=customer_id), asynchronous=False)
        assert unread_count(customer_id) == 1

        marked = current_domain.process(MarkAllNotificationsRead(user_id=customer_id), asynchronous=False)
        assert marked == 1
        assert unread_count(customer_id) == 0

    def test_cannot_mark_someone_elses_notification(self, customer_id, register_customer):
        other = register_customer(name="Vikram Rao")
        notification_id = current_domain.process(
            SendNotification(title="Private", body="Only for you", user_id=other),
            asynchronous=False,
        )
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                MarkNotificationRead(notification_id=notification_id, user_id=customer_id),
                asynchronous=False,
            )
