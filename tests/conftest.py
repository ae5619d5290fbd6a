import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is initialized."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def grocery_bed():
    from grocery.domain import grocery
    from grocery.utils.db import drop_db, setup_db

    bed = DomainFixture(grocery)
    bed.setup()
    setup_db(grocery)
    yield bed
    drop_db(grocery)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(grocery_bed):
    """Run every test inside the grocery domain context and wipe state afterwards."""
    with grocery_bed.domain_context():
        yield

        from protean import current_domain

        from grocery.tracking import reset_hub

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        current_domain.event_store.store._data_reset()
        reset_hub()


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------
@pytest.fixture()
def register_customer():
    """Factory: register a customer and return its id."""
    from protean import current_domain

    from grocery.identity.registration import RegisterCustomer

    counter = {"n": 0}

    def _register(name="Asha Verma", phone=None, role="customer", email=None):
        counter["n"] += 1
        return current_domain.process(
            RegisterCustomer(
                name=name,
                phone=phone or f"98765{counter['n']:05d}",
                email=email,
                role=role,
            ),
            asynchronous=False,
        )

    return _register


@pytest.fixture()
def customer_id(register_customer):
    return register_customer()


@pytest.fixture()
def admin_id(register_customer):
    return register_customer(name="Store Admin", phone="9000000001", role="admin")


@pytest.fixture()
def add_address():
    """Factory: add an address to a customer's book and return its id."""
    from protean import current_domain

    from grocery.identity.addresses import AddAddress

    def _add(customer_id, city="Pune", **overrides):
        details = {
            "full_name": "Asha Verma",
            "phone": "9876500001",
            "address_line1": "12 MG Road",
            "city": city,
            "state": "Maharashtra",
            "pincode": "411001",
            "latitude": 18.5204,
            "longitude": 73.8567,
        }
        details.update(overrides)
        return current_domain.process(AddAddress(customer_id=customer_id, **details), asynchronous=False)

    return _add


@pytest.fixture()
def address_id(customer_id, add_address):
    return add_address(customer_id)


@pytest.fixture()
def create_product():
    """Factory: create an active product and return its id."""
    from protean import current_domain

    from grocery.catalogue.product_management import CreateProduct

    def _create(name="Basmati Rice 1kg", price=100.0, mrp=None, stock=50, **extra):
        return current_domain.process(
            CreateProduct(name=name, price=price, mrp=mrp, stock=stock, **extra),
            asynchronous=False,
        )

    return _create


@pytest.fixture()
def product_id(create_product):
    return create_product()


@pytest.fixture()
def fill_cart():
    """Factory: add ``quantity`` of a product to the customer's cart."""
    from protean import current_domain

    from grocery.cart.items import AddToCart

    def _fill(customer_id, product_id, quantity=1, variant_name=None, variant_value=None):
        return current_domain.process(
            AddToCart(
                customer_id=customer_id,
                product_id=product_id,
                quantity=quantity,
                variant_name=variant_name,
                variant_value=variant_value,
            ),
            asynchronous=False,
        )

    return _fill


@pytest.fixture()
def place_order():
    """Factory: check out the customer's cart and return the order id."""
    from protean import current_domain

    from grocery.order.placement import PlaceOrder

    def _place(customer_id, address_id, payment_method="cod", loyalty_points_to_use=0, notes=None):
        return current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                address_id=address_id,
                payment_method=payment_method,
                loyalty_points_to_use=loyalty_points_to_use,
                notes=notes,
            ),
            asynchronous=False,
        )

    return _place


@pytest.fixture()
def create_coupon():
    """Factory: create a coupon valid from yesterday until next week."""
    from protean import current_domain

    from grocery.coupon.management import CreateCoupon

    def _create(code="SAVE10", value=10.0, coupon_type="percentage", **extra):
        now = datetime.now()
        extra.setdefault("start_date", now - timedelta(days=1))
        extra.setdefault("end_date", now + timedelta(days=7))
        return current_domain.process(
            CreateCoupon(code=code, value=value, coupon_type=coupon_type, **extra),
            asynchronous=False,
        )

    return _create


@pytest.fixture()
def register_agent():
    """Factory: onboard an approved delivery agent and return its id."""
    from protean import current_domain

    from grocery.delivery.application import RegisterAgent

    def _register(name="Ravi Kumar", phone="9111100001", vehicle_number="MH12AB1234"):
        return current_domain.process(
            RegisterAgent(name=name, phone=phone, vehicle_number=vehicle_number),
            asynchronous=False,
        )

    return _register
