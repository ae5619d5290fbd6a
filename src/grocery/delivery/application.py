"""Delivery partner onboarding: applications, admin review and direct registration."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from grocery.delivery.agent import ApplicationStatus, DeliveryAgent, VehicleType
from grocery.delivery.queries import find_agent_for_user, get_agent
from grocery.domain import grocery
from grocery.identity.customer import Customer, Role

logger = structlog.get_logger(__name__)


@grocery.command(part_of="DeliveryAgent")
class ApplyAsPartner:
    user_id: Identifier(required=True)
    vehicle_type: String(choices=VehicleType, default=VehicleType.BIKE.value)
    vehicle_number: String(max_length=20)
    license_number: String(max_length=30)


@grocery.command(part_of="DeliveryAgent")
class ReviewApplication:
    agent_id: Identifier(required=True)
    status: String(required=True, choices=ApplicationStatus)


@grocery.command(part_of="DeliveryAgent")
class RegisterAgent:
    name: String(required=True, max_length=100, sanitize=False)
    phone: String(required=True, max_length=20)
    email: String(max_length=254)
    vehicle_type: String(choices=VehicleType, default=VehicleType.BIKE.value)
    vehicle_number: String(max_length=20)
    license_number: String(max_length=30)


@grocery.command(part_of="DeliveryAgent")
class UpdateAgent:
    agent_id: Identifier(required=True)
    name: String(max_length=100, sanitize=False)
    phone: String(max_length=20)
    email: String(max_length=254)
    vehicle_type: String(choices=VehicleType)
    vehicle_number: String(max_length=20)
    license_number: String(max_length=30)


@grocery.command(part_of="DeliveryAgent")
class DeactivateAgent:
    agent_id: Identifier(required=True)


@grocery.command_handler(part_of=DeliveryAgent)
class PartnerOnboardingHandler:
    @handle(ApplyAsPartner)
    def apply_as_partner(self, command):
        if find_agent_for_user(command.user_id) is not None:
            raise ValidationError({"application": ["Application already submitted"]})

        customer = current_domain.repository_for(Customer).get(command.user_id)
        agent = DeliveryAgent.apply(
            user_id=customer.id,
            name=customer.name,
            phone=customer.phone,
            email=customer.email,
            vehicle_type=command.vehicle_type,
            vehicle_number=command.vehicle_number,
            license_number=command.license_number,
        )
        current_domain.repository_for(DeliveryAgent).add(agent)
        logger.info("partner application submitted", agent_id=str(agent.id), user_id=str(customer.id))
        return str(agent.id)

    @handle(ReviewApplication)
    def review_application(self, command):
        agent = get_agent(command.agent_id)
        agent.review(command.status)

        if agent.application_status == ApplicationStatus.APPROVED.value:
            customer_repo = current_domain.repository_for(Customer)
            customer = customer_repo.get(agent.user_id)
            customer.promote_to_delivery()
            customer_repo.add(customer)

        current_domain.repository_for(DeliveryAgent).add(agent)
        logger.info("partner application reviewed", agent_id=str(agent.id), status=agent.application_status)

    @handle(RegisterAgent)
    def register_agent(self, command):
        customer_repo = current_domain.repository_for(Customer)
        existing = customer_repo._dao.query.filter(phone=command.phone).all().items
        if existing:
            customer = existing[0]
            customer.promote_to_delivery()
        else:
            customer = Customer.register(
                name=command.name,
                phone=command.phone,
                email=command.email,
                role=Role.DELIVERY.value,
            )

        if find_agent_for_user(customer.id) is not None:
            raise ValidationError({"phone": ["A delivery agent already exists for this phone number"]})

        agent = DeliveryAgent.register(
            user_id=customer.id,
            name=command.name,
            phone=command.phone,
            email=command.email,
            vehicle_type=command.vehicle_type,
            vehicle_number=command.vehicle_number,
            license_number=command.license_number,
        )
        customer_repo.add(customer)
        current_domain.repository_for(DeliveryAgent).add(agent)
        return str(agent.id)

    @handle(UpdateAgent)
    def update_agent(self, command):
        agent = get_agent(command.agent_id)
        agent.update_details(
            name=command.name,
            phone=command.phone,
            email=command.email,
            vehicle_type=command.vehicle_type,
            vehicle_number=command.vehicle_number,
            license_number=command.license_number,
        )
        current_domain.repository_for(DeliveryAgent).add(agent)

    @handle(DeactivateAgent)
    def deactivate_agent(self, command):
        agent = get_agent(command.agent_id)
        agent.deactivate()
        current_domain.repository_for(DeliveryAgent).add(agent)
