"""Customer registration and account administration."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from grocery.domain import grocery
from grocery.identity.customer import Customer, Role

logger = structlog.get_logger(__name__)


@grocery.command(part_of="Customer")
class RegisterCustomer:
    name: String(required=True, max_length=100, sanitize=False)
    phone: String(required=True, max_length=20)
    email: String(max_length=254)
    role: String(choices=Role, default=Role.CUSTOMER.value)


@grocery.command(part_of="Customer")
class UpdateProfile:
    customer_id: Identifier(required=True)
    name: String(max_length=100, sanitize=False)
    email: String(max_length=254)


@grocery.command(part_of="Customer")
class DeactivateCustomer:
    customer_id: Identifier(required=True)


@grocery.command(part_of="Customer")
class ActivateCustomer:
    customer_id: Identifier(required=True)


@grocery.command_handler(part_of=Customer)
class CustomerAccountHandler:
    @handle(RegisterCustomer)
    def register_customer(self, command):
        repo = current_domain.repository_for(Customer)
        if repo._dao.query.filter(phone=command.phone).all().items:
            raise ValidationError({"phone": ["Phone number already registered"]})

        customer = Customer.register(
            name=command.name,
            phone=command.phone,
            email=command.email,
            role=command.role,
        )
        repo.add(customer)
        logger.info("customer registered", customer_id=str(customer.id), role=customer.role)
        return str(customer.id)

    @handle(UpdateProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.update_profile(name=command.name, email=command.email)
        repo.add(customer)

    @handle(DeactivateCustomer)
    def deactivate_customer(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.deactivate()
        repo.add(customer)
        logger.info("customer deactivated", customer_id=str(customer.id))

    @handle(ActivateCustomer)
    def activate_customer(self, command):
        repo = current_domain.repository_for(Customer)
        customer = repo.get(command.customer_id)
        customer.activate()
        repo.add(customer)
