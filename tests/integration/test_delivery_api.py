"""Integration tests for the delivery partner endpoints and live tracking."""

import pytest
from fastapi.websockets import WebSocketDisconnect
from grocery.delivery.agent import DeliveryAgent
from grocery.delivery.assignment import AssignDeliveryAgent
from grocery.order.status import UpdateOrderStatus
from protean import current_domain


@pytest.fixture()
def order_id(customer_id, address_id, product_id, fill_cart, place_order):
    fill_cart(customer_id, product_id, quantity=2)
    order_id = place_order(customer_id, address_id)
    for status in ("confirmed", "preparing"):
        current_domain.process(UpdateOrderStatus(order_id=order_id, status=status), asynchronous=False)
    return order_id


@pytest.fixture()
def agent(register_agent):
    return current_domain.repository_for(DeliveryAgent).get(register_agent())


@pytest.fixture()
def agent_headers(agent, auth):
    return auth(agent.user_id, "delivery")


def test_customers_cannot_use_agent_routes(client, customer_headers):
    response = client.put("/delivery/toggle-availability", headers=customer_headers)
    assert response.status_code == 403


def test_toggle_availability(client, agent_headers):
    response = client.put("/delivery/toggle-availability", headers=agent_headers)
    assert response.json()["message"] == "You are now online"
    assert response.json()["data"]["agent"]["is_available"] is True


def test_full_delivery_run(client, admin_headers, agent_headers, agent, order_id, customer_headers):
    client.put("/delivery/toggle-availability", headers=agent_headers)

    assigned = client.put(
        f"/orders/admin/{order_id}/assign-agent",
        json={"agent_id": str(agent.id)},
        headers=admin_headers,
    )
    assert assigned.status_code == 200
    assert assigned.json()["data"]["order"]["status"] == "out_for_delivery"

    current = client.get("/delivery/current-delivery", headers=agent_headers).json()["data"]["order"]
    assert current["id"] == str(order_id)
    assert "delivery_otp" not in current

    for status in ("picked_up", "arrived"):
        response = client.put("/delivery/status", json={"order_id": str(order_id), "status": status}, headers=agent_headers)
        assert response.status_code == 200

    wrong = client.post("/delivery/complete-delivery", json={"otp": "abc"}, headers=agent_headers)
    assert wrong.status_code == 400
    assert wrong.json()["error"] == "conflict"

    otp = client.get(f"/orders/my-orders/{order_id}", headers=customer_headers).json()["data"]["order"]["delivery_otp"]
    done = client.post("/delivery/complete-delivery", json={"otp": otp}, headers=agent_headers)
    assert done.status_code == 200
    assert done.json()["data"]["order"]["status"] == "delivered"
    assert done.json()["data"]["order"]["payment_status"] == "paid"

    profile = client.get("/delivery/profile", headers=agent_headers).json()["data"]["agent"]
    assert profile["total_deliveries"] == 1
    assert profile["current_order_id"] is None


def test_double_booking_is_rejected(
    client, admin_headers, agent, order_id, customer_id, address_id, product_id, fill_cart, place_order
):
    client.put(f"/orders/admin/{order_id}/assign-agent", json={"agent_id": str(agent.id)}, headers=admin_headers)

    fill_cart(customer_id, product_id, quantity=1)
    second = place_order(customer_id, address_id)
    for status in ("confirmed", "preparing"):
        current_domain.process(UpdateOrderStatus(order_id=second, status=status), asynchronous=False)

    response = client.put(f"/orders/admin/{second}/assign-agent", json={"agent_id": str(agent.id)}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Delivery agent is already on another delivery"


class TestTracking:
    def test_strangers_are_refused(self, client, order_id, register_customer, auth):
        stranger = auth(register_customer(name="Vikram Rao"))["Authorization"].split(" ")[1]
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(f"/tracking/orders/{order_id}?token={stranger}") as ws:
                ws.receive_json()

    def test_owner_receives_status_updates(self, client, order_id, customer_headers, agent):
        token = customer_headers["Authorization"].split(" ")[1]
        with client.websocket_connect(f"/tracking/orders/{order_id}?token={token}") as ws:
            subscribed = ws.receive_json()
            assert subscribed["event"] == "subscribed"
            assert subscribed["data"]["status"] == "preparing"

            current_domain.process(AssignDeliveryAgent(order_id=order_id, agent_id=agent.id), asynchronous=False)

            message = ws.receive_json()
            assert message["event"] == "status-updated"
            assert message["data"]["status"] == "out_for_delivery"
