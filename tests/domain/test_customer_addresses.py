"""Tests for the customer's address book."""

import pytest
from grocery.identity.customer import MAX_ADDRESSES, Customer
from protean.exceptions import ValidationError


def _address(city="Pune"):
    return {
        "full_name": "Asha Verma",
        "phone": "9876500001",
        "address_line1": "12 MG Road",
        "city": city,
        "state": "Maharashtra",
        "pincode": "411001",
    }


@pytest.fixture()
def customer():
    return Customer.register(name="Asha Verma", phone="9876500001")


def test_first_address_becomes_default(customer):
    address = customer.add_address(**_address())
    assert address.is_default is True


def test_new_default_replaces_old(customer):
    customer.add_address(**_address())
    second = customer.add_address(is_default=True, **_address("Mumbai"))

    defaults = [a for a in customer.addresses if a.is_default]
    assert defaults == [second]


def test_removing_default_promotes_another(customer):
    first = customer.add_address(**_address())
    customer.add_address(**_address("Mumbai"))

    customer.remove_address(first.id)

    assert len(customer.addresses) == 1
    assert customer.addresses[0].is_default is True


def test_address_book_is_capped(customer):
    for _ in range(MAX_ADDRESSES):
        customer.add_address(**_address())
    with pytest.raises(ValidationError):
        customer.add_address(**_address())


def test_promotion_keeps_admin_role():
    admin = Customer.register(name="Store Admin", phone="9000000001", role="admin")
    admin.promote_to_delivery()
    assert admin.role == "admin"
