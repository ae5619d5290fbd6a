"""DeliveryAgent aggregate: a delivery partner and their single active order.

An agent holds at most one order at a time. ``claim_order`` refuses a second
order while ``current_order_id`` is set, and the claim is saved in the same
unit of work as the order's move to ``out_for_delivery``.
"""

from datetime import datetime
from enum import Enum

from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, ValueObject

from grocery.delivery.events import AgentLocationUpdated, PartnerApplicationReviewed
from grocery.domain import grocery
from grocery.settings import AGENT_FEE_PER_DELIVERY
from grocery.shared.geo import GeoPoint


class VehicleType(Enum):
    BIKE = "bike"
    SCOOTER = "scooter"
    BICYCLE = "bicycle"
    CAR = "car"


class ApplicationStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@grocery.aggregate
class DeliveryAgent:
    user_id: Identifier(required=True, unique=True)
    name: String(required=True, max_length=100, sanitize=False)
    phone: String(required=True, max_length=20)
    email: String(max_length=254)
    vehicle_type: String(choices=VehicleType, default=VehicleType.BIKE.value)
    vehicle_number: String(max_length=20)
    license_number: String(max_length=30)
    is_available: Boolean(default=False)
    is_active: Boolean(default=False)
    is_online: Boolean(default=False)
    current_location: ValueObject(GeoPoint)
    current_order_id: Identifier()
    total_deliveries: Integer(default=0, min_value=0)
    rating_average: Float(default=0.0, min_value=0.0, max_value=5.0)
    rating_count: Integer(default=0, min_value=0)
    application_status: String(choices=ApplicationStatus, default=ApplicationStatus.PENDING.value)
    earnings_today: Float(default=0.0, min_value=0.0)
    earnings_total: Float(default=0.0, min_value=0.0)
    created_at: DateTime(default=datetime.now)

    @classmethod
    def apply(cls, user_id, name, phone, email=None, vehicle_type=None, vehicle_number=None, license_number=None):
        """A customer's partner application. Stays inactive until approved."""
        return cls(
            user_id=user_id,
            name=name,
            phone=phone,
            email=email,
            vehicle_type=vehicle_type or VehicleType.BIKE.value,
            vehicle_number=vehicle_number,
            license_number=license_number,
            application_status=ApplicationStatus.PENDING.value,
            is_active=False,
            is_online=False,
            is_available=False,
            created_at=datetime.now(),
        )

    @classmethod
    def register(cls, user_id, name, phone, email=None, vehicle_type=None, vehicle_number=None, license_number=None):
        """An agent onboarded directly by an admin, approved from the start."""
        agent = cls.apply(user_id, name, phone, email, vehicle_type, vehicle_number, license_number)
        agent.application_status = ApplicationStatus.APPROVED.value
        agent.is_active = True
        return agent

    @property
    def is_busy(self) -> bool:
        return self.current_order_id is not None

    @property
    def is_dispatchable(self) -> bool:
        return self.is_active and self.is_online and self.is_available and not self.is_busy

    # -------------------------------------------------------------------
    # Application review
    # -------------------------------------------------------------------
    def review(self, status):
        status = ApplicationStatus(status)
        if status == ApplicationStatus.PENDING:
            raise ValidationError({"status": ["Application can only be approved or rejected"]})

        self.application_status = status.value
        self.is_active = status == ApplicationStatus.APPROVED
        if not self.is_active:
            self.is_online = False
            self.is_available = False

        self.raise_(
            PartnerApplicationReviewed(
                agent_id=self.id,
                user_id=self.user_id,
                application_status=status.value,
                reviewed_at=datetime.now(),
            )
        )

    def deactivate(self):
        if self.is_busy:
            raise InvalidOperationError("Cannot deactivate an agent during a delivery")
        self.is_active = False
        self.is_online = False
        self.is_available = False

    def update_details(self, **changes):
        for field_name, value in changes.items():
            if value is not None:
                setattr(self, field_name, value)

    # -------------------------------------------------------------------
    # Shift
    # -------------------------------------------------------------------
    def toggle_availability(self):
        """Flip online status. Available follows online unless an order is in hand."""
        self.is_online = not self.is_online
        self.is_available = self.is_online and not self.is_busy

    def update_location(self, latitude, longitude):
        self.current_location = GeoPoint(latitude=latitude, longitude=longitude)
        self.raise_(
            AgentLocationUpdated(
                agent_id=self.id,
                current_order_id=self.current_order_id,
                latitude=latitude,
                longitude=longitude,
                reported_at=datetime.now(),
            )
        )

    def distance_to(self, latitude, longitude):
        if self.current_location is None:
            return None
        return self.current_location.distance_to(latitude, longitude)

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    def claim_order(self, order_id):
        if not self.is_active:
            raise InvalidOperationError("Delivery agent is not active")
        if self.is_busy and str(self.current_order_id) != str(order_id):
            raise InvalidOperationError("Delivery agent is already on another delivery")
        self.current_order_id = order_id
        self.is_available = False

    def finish_delivery(self, fee=AGENT_FEE_PER_DELIVERY):
        self.current_order_id = None
        self.is_available = self.is_online
        self.total_deliveries += 1
        self.earnings_today += fee
        self.earnings_total += fee
