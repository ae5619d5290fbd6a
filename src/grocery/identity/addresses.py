"""Address book management: commands and handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, String
from protean.utils.globals import current_domain

from grocery.domain import grocery
from grocery.identity.customer import AddressType, Customer
from grocery.shared.geo import GeoPoint


@grocery.command(part_of="Customer")
class AddAddress:
    customer_id: Identifier(required=True)
    full_name: String(required=True, max_length=100, sanitize=False)
    phone: String(required=True, max_length=20)
    address_line1: String(required=True, max_length=255)
    address_line2: String(max_length=255)
    landmark: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(required=True, max_length=100)
    pincode: String(required=True, max_length=10)
    address_type: String(choices=AddressType, default=AddressType.HOME.value)
    latitude: Float()
    longitude: Float()
    is_default: Boolean(default=False)


@grocery.command(part_of="Customer")
class UpdateAddress:
    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)
    full_name: String(max_length=100, sanitize=False)
    phone: String(max_length=20)
    address_line1: String(max_length=255)
    address_line2: String(max_length=255)
    landmark: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    pincode: String(max_length=10)
    address_type: String(choices=AddressType)
    is_default: Boolean()


@grocery.command(part_of="Customer")
class RemoveAddress:
    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)


@grocery.command(part_of="Customer")
class SetDefaultAddress:
    customer_id: Identifier(required=True)
    address_id: Identifier(required=True)


@grocery.command_handler(part_of=Customer)
class ManageAddressesHandler:
    @handle(AddAddress)
    def add_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)

        location = None
        if command.latitude is not None and command.longitude is not None:
            location = GeoPoint(latitude=command.latitude, longitude=command.longitude)

        address = customer.add_address(
            is_default=command.is_default,
            full_name=command.full_name,
            phone=command.phone,
            address_line1=command.address_line1,
            address_line2=command.address_line2,
            landmark=command.landmark,
            city=command.city,
            state=command.state,
            pincode=command.pincode,
            address_type=command.address_type,
            location=location,
        )
        repo.add(customer)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.update_address(
            command.address_id,
            is_default=command.is_default,
            full_name=command.full_name,
            phone=command.phone,
            address_line1=command.address_line1,
            address_line2=command.address_line2,
            landmark=command.landmark,
            city=command.city,
            state=command.state,
            pincode=command.pincode,
            address_type=command.address_type,
        )
        repo.add(customer)

    @handle(RemoveAddress)
    def remove_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.remove_address(command.address_id)
        repo.add(customer)

    @handle(SetDefaultAddress)
    def set_default_address(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.set_default_address(command.address_id)
        repo.add(customer)
