"""Customer aggregate root with the Address entity.

Every person who signs in is a Customer record; ``role`` separates shoppers,
delivery partners and admins. ``loyalty_points`` is the running balance of
the loyalty ledger and moves only together with a ledger entry.
"""

from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Integer, String, ValueObject

from grocery.domain import grocery
from grocery.shared.geo import GeoPoint

MAX_ADDRESSES = 10


class Role(Enum):
    CUSTOMER = "customer"
    DELIVERY = "delivery"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class AddressType(Enum):
    HOME = "home"
    WORK = "work"
    OTHER = "other"


ADMIN_ROLES = (Role.ADMIN.value, Role.SUPERADMIN.value)


@grocery.entity(part_of="Customer")
class Address:
    """A delivery address in the customer's address book."""

    full_name: String(required=True, max_length=100, sanitize=False)
    phone: String(required=True, max_length=20)
    address_line1: String(required=True, max_length=255)
    address_line2: String(max_length=255)
    landmark: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(required=True, max_length=100)
    pincode: String(required=True, max_length=10)
    address_type: String(choices=AddressType, default=AddressType.HOME.value)
    location: ValueObject(GeoPoint)
    is_default: Boolean(default=False)


@grocery.aggregate
class Customer:
    name: String(required=True, max_length=100, sanitize=False)
    phone: String(required=True, max_length=20, unique=True)
    email: String(max_length=254)
    role: String(choices=Role, default=Role.CUSTOMER.value)
    is_active: Boolean(default=True)
    loyalty_points: Integer(default=0, min_value=0)
    addresses: HasMany(Address)
    created_at: DateTime(default=datetime.now)

    @invariant.post
    def addresses_cannot_exceed_maximum(self):
        if len(self.addresses) > MAX_ADDRESSES:
            raise ValidationError({"addresses": [f"Cannot have more than {MAX_ADDRESSES} addresses"]})

    @invariant.post
    def exactly_one_default_address_when_addresses_exist(self):
        if not self.addresses:
            return
        if len([a for a in self.addresses if a.is_default]) != 1:
            raise ValidationError({"addresses": ["Exactly one address must be marked as default"]})

    @classmethod
    def register(cls, name, phone, email=None, role=Role.CUSTOMER.value):
        return cls(name=name, phone=phone, email=email, role=role, created_at=datetime.now())

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def update_profile(self, name=None, email=None):
        if name is not None:
            self.name = name
        if email is not None:
            self.email = email

    def deactivate(self):
        self.is_active = False

    def activate(self):
        self.is_active = True

    def promote_to_delivery(self):
        """Approved delivery partners sign in with the delivery role. Admins keep theirs."""
        if self.role == Role.CUSTOMER.value:
            self.role = Role.DELIVERY.value

    # -------------------------------------------------------------------
    # Address book
    # -------------------------------------------------------------------
    def find_address(self, address_id):
        return next((a for a in self.addresses if str(a.id) == str(address_id)), None)

    def add_address(self, is_default=False, **details):
        if not self.addresses:
            is_default = True

        with atomic_change(self):
            if is_default:
                for existing in self.addresses:
                    existing.is_default = False
            address = Address(is_default=is_default, **details)
            self.add_addresses(address)
        return address

    def update_address(self, address_id, is_default=None, **details):
        address = self.find_address(address_id)
        if address is None:
            raise ValidationError({"address_id": ["Address not found"]})

        with atomic_change(self):
            for field_name, value in details.items():
                if value is not None:
                    setattr(address, field_name, value)
            if is_default:
                for existing in self.addresses:
                    existing.is_default = str(existing.id) == str(address.id)
        return address

    def remove_address(self, address_id):
        address = self.find_address(address_id)
        if address is None:
            raise ValidationError({"address_id": ["Address not found"]})

        with atomic_change(self):
            self.remove_addresses(address)
            if address.is_default and self.addresses:
                self.addresses[0].is_default = True

    def set_default_address(self, address_id):
        address = self.find_address(address_id)
        if address is None:
            raise ValidationError({"address_id": ["Address not found"]})

        with atomic_change(self):
            for existing in self.addresses:
                existing.is_default = str(existing.id) == str(address_id)

    # -------------------------------------------------------------------
    # Loyalty balance
    # -------------------------------------------------------------------
    def adjust_loyalty_points(self, delta):
        if self.loyalty_points + delta < 0:
            raise ValidationError({"loyalty_points": ["Insufficient loyalty points"]})
        self.loyalty_points += delta
