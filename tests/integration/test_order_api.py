"""Integration tests for the cart, checkout and order endpoints via TestClient."""

import pytest
from grocery.catalogue.product import Product
from grocery.order.order import Order, OrderStatus
from protean import current_domain


@pytest.fixture()
def address_id(client, customer_headers):
    response = client.post(
        "/addresses",
        json={
            "full_name": "Asha Verma",
            "phone": "9876500001",
            "address_line1": "12 MG Road",
            "city": "Pune",
            "state": "Maharashtra",
            "pincode": "411001",
        },
        headers=customer_headers,
    )
    assert response.status_code == 201
    return response.json()["data"]["addresses"][0]["id"]


def _checkout(client, headers, product_id, address_id, quantity=2):
    client.post("/cart/add", json={"product_id": product_id, "quantity": quantity}, headers=headers)
    response = client.post("/orders", json={"address_id": address_id, "payment_method": "cod"}, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]["order"]


class TestCartEndpoints:
    def test_add_merges_lines(self, client, customer_headers, product_id):
        client.post("/cart/add", json={"product_id": product_id, "quantity": 2}, headers=customer_headers)
        response = client.post("/cart/add", json={"product_id": product_id, "quantity": 3}, headers=customer_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Item added to cart"
        cart = body["data"]["cart"]
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 5
        assert cart["subtotal"] == 500.0

    def test_update_and_remove_item(self, client, customer_headers, product_id):
        added = client.post("/cart/add", json={"product_id": product_id, "quantity": 2}, headers=customer_headers)
        item_id = added.json()["data"]["cart"]["items"][0]["id"]

        updated = client.put(f"/cart/item/{item_id}", json={"quantity": 4}, headers=customer_headers)
        assert updated.json()["data"]["cart"]["total_items"] == 4

        removed = client.delete(f"/cart/item/{item_id}", headers=customer_headers)
        assert removed.json()["data"]["cart"]["items"] == []

    def test_coupon_apply_and_remove(self, client, customer_headers, product_id, create_coupon):
        create_coupon(code="SAVE10", value=10.0)
        client.post("/cart/add", json={"product_id": product_id, "quantity": 2}, headers=customer_headers)

        applied = client.post("/cart/coupon/apply", json={"code": "save10"}, headers=customer_headers)
        assert applied.status_code == 200
        assert applied.json()["data"]["cart"]["coupon_discount"] == 20.0

        removed = client.delete("/cart/coupon/remove", headers=customer_headers)
        assert removed.json()["data"]["cart"]["coupon_code"] is None

    def test_unknown_coupon(self, client, customer_headers, product_id):
        client.post("/cart/add", json={"product_id": product_id, "quantity": 1}, headers=customer_headers)
        response = client.post("/cart/coupon/apply", json={"code": "NOPE"}, headers=customer_headers)
        assert response.status_code == 404
        assert response.json()["message"] == "Invalid coupon code"


class TestOrderEndpoints:
    def test_place_order(self, client, customer_headers, product_id, address_id):
        order = _checkout(client, customer_headers, product_id, address_id)

        assert order["subtotal"] == 200.0
        assert order["delivery_charge"] == 30.0
        assert order["total_amount"] == 230.0
        assert order["status"] == "placed"
        assert "delivery_otp" not in order

        assert current_domain.repository_for(Product).get(product_id).stock == 48
        cart = client.get("/cart", headers=customer_headers).json()["data"]["cart"]
        assert cart["items"] == []

    def test_own_order_detail_includes_otp(self, client, customer_headers, product_id, address_id):
        order = _checkout(client, customer_headers, product_id, address_id)

        by_number = client.get(f"/orders/my-orders/{order['order_number']}", headers=customer_headers)
        detail = by_number.json()["data"]["order"]
        assert detail["id"] == order["id"]
        assert len(detail["delivery_otp"]) == 6

    def test_admin_reads_never_include_otp(self, client, customer_headers, admin_headers, product_id, address_id):
        order = _checkout(client, customer_headers, product_id, address_id)

        listing = client.get("/orders/admin/all", headers=admin_headers).json()["data"]["orders"]
        assert "delivery_otp" not in listing[0]
        detail = client.get(f"/orders/admin/{order['id']}", headers=admin_headers).json()["data"]["order"]
        assert "delivery_otp" not in detail

    def test_other_customers_cannot_see_order(
        self, client, customer_headers, product_id, address_id, register_customer, auth
    ):
        order = _checkout(client, customer_headers, product_id, address_id)
        stranger = auth(register_customer(name="Vikram Rao"))

        response = client.get(f"/orders/my-orders/{order['id']}", headers=stranger)
        assert response.status_code == 404

    def test_my_orders_pagination(self, client, customer_headers, product_id, address_id):
        _checkout(client, customer_headers, product_id, address_id)
        _checkout(client, customer_headers, product_id, address_id, quantity=1)

        response = client.get("/orders/my-orders?limit=1", headers=customer_headers)
        data = response.json()["data"]
        assert len(data["orders"]) == 1
        assert data["pagination"]["total"] == 2
        assert data["pagination"]["pages"] == 2

    def test_cancel_order(self, client, customer_headers, product_id, address_id):
        order = _checkout(client, customer_headers, product_id, address_id)

        response = client.put(f"/orders/{order['id']}/cancel", json={"reason": "Changed my mind"}, headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["data"]["order"]["status"] == "cancelled"
        assert current_domain.repository_for(Product).get(product_id).stock == 50

    def test_cancel_after_preparing_is_a_conflict(
        self, client, customer_headers, admin_headers, product_id, address_id
    ):
        order = _checkout(client, customer_headers, product_id, address_id)
        for status in ("confirmed", "preparing"):
            client.put(f"/orders/admin/{order['id']}/status", json={"status": status}, headers=admin_headers)

        response = client.put(f"/orders/{order['id']}/cancel", json={}, headers=customer_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "conflict"
        assert response.json()["message"] == "Order cannot be cancelled at this stage"

    def test_illegal_admin_transition(self, client, customer_headers, admin_headers, product_id, address_id):
        order = _checkout(client, customer_headers, product_id, address_id)

        response = client.put(
            f"/orders/admin/{order['id']}/status",
            json={"status": "delivered"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Cannot transition from placed to delivered"
        assert current_domain.repository_for(Order).get(order["id"]).status == OrderStatus.PLACED.value

    def test_reorder(self, client, customer_headers, product_id, address_id):
        order = _checkout(client, customer_headers, product_id, address_id)

        response = client.post(f"/orders/{order['id']}/reorder", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["data"]["cart"]["items"][0]["quantity"] == 2
