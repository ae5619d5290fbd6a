"""Order aggregate: the snapshot of a checked-out cart and its lifecycle.

Line items and the delivery address are copies taken at checkout, so later
catalogue or address-book edits never change a past order. After creation
only the status, history, delivery agent, payment and delivery-time fields
change, and every status change goes through ``_VALID_TRANSITIONS``.

State Machine:
    placed → confirmed → preparing → out_for_delivery → picked_up →
    arrived → delivered
    placed | confirmed → cancelled → refunded
"""

import hmac
from datetime import datetime, timedelta
from enum import Enum

from protean import invariant
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from grocery.domain import grocery
from grocery.loyalty.ledger import rupees_for_points
from grocery.order.events import OrderPlaced, OrderStatusChanged, PaymentConfirmed
from grocery.order.number import generate_delivery_otp
from grocery.settings import DELIVERY_CHARGE, ESTIMATED_DELIVERY_MINUTES, FREE_DELIVERY_THRESHOLD


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PLACED = "placed"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    PICKED_UP = "picked_up"
    ARRIVED = "arrived"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    COD = "cod"
    RAZORPAY = "razorpay"
    STRIPE = "stripe"
    WALLET = "wallet"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


_VALID_TRANSITIONS = {
    OrderStatus.PLACED: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.OUT_FOR_DELIVERY},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.PICKED_UP},
    OrderStatus.PICKED_UP: {OrderStatus.ARRIVED},
    OrderStatus.ARRIVED: {OrderStatus.DELIVERED},
    OrderStatus.CANCELLED: {OrderStatus.REFUNDED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}

_CANCELLABLE_STATES = {OrderStatus.PLACED, OrderStatus.CONFIRMED}

# Statuses a delivery agent may report for their own order
AGENT_REPORTABLE_STATES = {OrderStatus.PICKED_UP, OrderStatus.ARRIVED, OrderStatus.DELIVERED}

TERMINAL_STATES = {status for status, targets in _VALID_TRANSITIONS.items() if not targets}


def can_transition(current, target) -> bool:
    return OrderStatus(target) in _VALID_TRANSITIONS[OrderStatus(current)]


def delivery_charge_for(subtotal) -> float:
    return 0.0 if subtotal >= FREE_DELIVERY_THRESHOLD else float(DELIVERY_CHARGE)


def order_total(subtotal, delivery_charge, coupon_discount, loyalty_discount) -> float:
    return round(max(0.0, subtotal + delivery_charge - coupon_discount - loyalty_discount), 2)


# ---------------------------------------------------------------------------
# Value Objects and Entities
# ---------------------------------------------------------------------------
@grocery.value_object(part_of="Order")
class DeliveryAddress:
    """The address an order is delivered to, copied from the address book at checkout."""

    full_name = String(required=True, max_length=100, sanitize=False)
    phone = String(required=True, max_length=20)
    address_line1 = String(required=True, max_length=255)
    address_line2 = String(max_length=255)
    landmark = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    pincode = String(required=True, max_length=10)
    latitude = Float()
    longitude = Float()


@grocery.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=200, sanitize=False)
    image = String(max_length=500)
    variant_name = String(max_length=50, sanitize=False)
    variant_value = String(max_length=50, sanitize=False)
    variant_price = Float(min_value=0.0)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    total = Float(required=True, min_value=0.0)

    @invariant.post
    def total_matches_price_and_quantity(self):
        if self.price is not None and self.quantity is not None and self.total is not None:
            if abs(self.total - round(self.price * self.quantity, 2)) > 0.005:
                raise ValidationError({"total": ["Line total must equal price x quantity"]})


@grocery.entity(part_of="Order")
class StatusChange:
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------
@grocery.aggregate
class Order:
    order_number = String(required=True, max_length=30, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    delivery_address = ValueObject(DeliveryAddress, required=True)
    subtotal = Float(required=True, min_value=0.0)
    delivery_charge = Float(default=0.0, min_value=0.0)
    coupon_id = Identifier()
    coupon_code = String(max_length=30)
    coupon_discount = Float(default=0.0, min_value=0.0)
    loyalty_points_used = Integer(default=0, min_value=0)
    loyalty_points_discount = Float(default=0.0, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_id = String(max_length=100)
    status = String(choices=OrderStatus, default=OrderStatus.PLACED.value)
    delivery_otp = String(max_length=10)
    delivery_agent_id = Identifier()
    estimated_delivery_time = DateTime()
    actual_delivery_time = DateTime()
    cancel_reason = String(max_length=500)
    notes = Text()
    status_history = HasMany(StatusChange)
    created_at = DateTime(default=datetime.now)
    updated_at = DateTime(default=datetime.now)

    @invariant.post
    def total_follows_pricing_rule(self):
        expected = order_total(
            self.subtotal or 0.0,
            self.delivery_charge or 0.0,
            self.coupon_discount or 0.0,
            self.loyalty_points_discount or 0.0,
        )
        if self.total_amount is not None and abs(self.total_amount - expected) > 0.005:
            raise ValidationError({"total_amount": ["Total does not match subtotal, delivery charge and discounts"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        lines,
        delivery_address,
        payment_method,
        coupon_id=None,
        coupon_code=None,
        coupon_discount=0.0,
        loyalty_points_used=0,
        notes=None,
        now=None,
    ):
        """Build a new order from priced lines.

        Args:
            lines: dicts with product_id, name, image, variant_name,
                variant_value, variant_price, price and quantity.
        """
        if not lines:
            raise ValidationError({"cart": ["Cart is empty"]})

        now = now or datetime.now()
        items = [OrderItem(total=round(line["price"] * line["quantity"], 2), **line) for line in lines]
        subtotal = round(sum(item.total for item in items), 2)
        delivery_charge = delivery_charge_for(subtotal)
        loyalty_discount = rupees_for_points(loyalty_points_used)

        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            delivery_address=delivery_address,
            subtotal=subtotal,
            delivery_charge=delivery_charge,
            coupon_id=coupon_id,
            coupon_code=coupon_code,
            coupon_discount=coupon_discount or 0.0,
            loyalty_points_used=loyalty_points_used,
            loyalty_points_discount=loyalty_discount,
            total_amount=order_total(subtotal, delivery_charge, coupon_discount or 0.0, loyalty_discount),
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PLACED.value,
            delivery_otp=generate_delivery_otp(),
            estimated_delivery_time=now + timedelta(minutes=ESTIMATED_DELIVERY_MINUTES),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.add_items(items)
        order.add_status_history(StatusChange(status=OrderStatus.PLACED.value, note="Order placed", changed_at=now))
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order_number,
                customer_id=customer_id,
                total_amount=order.total_amount,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def belongs_to(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)

    def is_assigned_to(self, agent_id) -> bool:
        return self.delivery_agent_id is not None and str(self.delivery_agent_id) == str(agent_id)

    @property
    def is_cancellable(self) -> bool:
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATES

    @property
    def is_cash_on_delivery(self) -> bool:
        return self.payment_method == PaymentMethod.COD.value

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidOperationError(f"Cannot transition from {current.value} to {target_status.value}")

    def _transition(self, target_status, note=None, now=None):
        self._assert_can_transition(target_status)
        now = now or datetime.now()
        previous = self.status

        self.status = target_status.value
        self.add_status_history(StatusChange(status=target_status.value, note=note, changed_at=now))
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=self.id,
                order_number=self.order_number,
                customer_id=self.customer_id,
                previous_status=previous,
                status=target_status.value,
                note=note,
                delivery_agent_id=self.delivery_agent_id,
                changed_at=now,
            )
        )

    def confirm(self, note=None):
        self._transition(OrderStatus.CONFIRMED, note or "Order confirmed")

    def start_preparing(self, note=None):
        self._transition(OrderStatus.PREPARING, note or "Order is being prepared")

    def assign_agent(self, agent_id, note=None):
        """Hand the order to a delivery agent. Only a preparing order can go out."""
        self._assert_can_transition(OrderStatus.OUT_FOR_DELIVERY)
        self.delivery_agent_id = agent_id
        self._transition(OrderStatus.OUT_FOR_DELIVERY, note or "Delivery agent assigned")

    def mark_picked_up(self, note=None):
        self._transition(OrderStatus.PICKED_UP, note or "Order picked up")

    def mark_arrived(self, note=None):
        self._transition(OrderStatus.ARRIVED, note or "Delivery agent has arrived")

    def verify_otp(self, otp) -> bool:
        if not otp or not self.delivery_otp:
            return False
        return hmac.compare_digest(str(otp), str(self.delivery_otp))

    def deliver(self, otp, note=None, now=None):
        """Complete the hand-over. The customer's OTP must match."""
        self._assert_can_transition(OrderStatus.DELIVERED)
        if not self.verify_otp(otp):
            raise InvalidOperationError("Invalid or missing OTP")
        self._complete_delivery(note, now)

    def deliver_without_otp(self, note=None, now=None):
        """Admin override for the final hand-over."""
        self._complete_delivery(note, now)

    def _complete_delivery(self, note, now):
        now = now or datetime.now()
        self._transition(OrderStatus.DELIVERED, note or "Order delivered", now)
        self.actual_delivery_time = now
        if self.payment_status != PaymentStatus.PAID.value:
            self._mark_paid(payment_id=self.payment_id, now=now)

    def cancel(self, reason=None):
        if not self.is_cancellable:
            raise InvalidOperationError("Order cannot be cancelled at this stage")
        self.cancel_reason = reason
        self._transition(OrderStatus.CANCELLED, reason or "Cancelled by customer")

    def refund(self, note=None):
        self._transition(OrderStatus.REFUNDED, note or "Order refunded")
        if self.payment_status == PaymentStatus.PAID.value:
            self.payment_status = PaymentStatus.REFUNDED.value

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment(self, payment_id=None, now=None):
        """Capture an online payment."""
        if self.payment_status == PaymentStatus.PAID.value:
            raise InvalidOperationError("Order is already paid")
        if OrderStatus(self.status) in (OrderStatus.CANCELLED, OrderStatus.REFUNDED):
            raise InvalidOperationError("Cannot pay for a cancelled order")
        self._mark_paid(payment_id, now)

    def record_payment_failure(self):
        if self.payment_status == PaymentStatus.PAID.value:
            raise InvalidOperationError("Order is already paid")
        self.payment_status = PaymentStatus.FAILED.value
        self.updated_at = datetime.now()

    def _mark_paid(self, payment_id=None, now=None):
        now = now or datetime.now()
        self.payment_status = PaymentStatus.PAID.value
        self.payment_id = payment_id
        self.updated_at = now
        self.raise_(
            PaymentConfirmed(
                order_id=self.id,
                order_number=self.order_number,
                customer_id=self.customer_id,
                amount=self.total_amount,
                payment_method=self.payment_method,
                payment_id=payment_id,
                confirmed_at=now,
            )
        )
