import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from grocery.api.admin import router as admin_router
from grocery.api.auth import create_access_token
from grocery.api.cart import router as cart_router
from grocery.api.catalogue import category_router, product_router
from grocery.api.coupons import router as coupon_router
from grocery.api.customers import address_router, customer_router, loyalty_router
from grocery.api.delivery import router as delivery_router
from grocery.api.errors import register_exception_handlers
from grocery.api.notifications import router as notification_router
from grocery.api.offers import router as offer_router
from grocery.api.orders import router as order_router
from grocery.api.payments import router as payment_router
from grocery.api.tracking import router as tracking_router

ROUTERS = (
    product_router,
    category_router,
    cart_router,
    order_router,
    delivery_router,
    coupon_router,
    customer_router,
    address_router,
    loyalty_router,
    notification_router,
    offer_router,
    payment_router,
    admin_router,
    tracking_router,
)


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture()
def auth():
    """Factory: bearer headers for a stored customer."""

    def _headers(customer_id, role="customer"):
        return {"Authorization": f"Bearer {create_access_token(customer_id, role)}"}

    return _headers


@pytest.fixture()
def customer_headers(customer_id, auth):
    return auth(customer_id)


@pytest.fixture()
def admin_headers(admin_id, auth):
    return auth(admin_id, "admin")
