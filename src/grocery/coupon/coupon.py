"""Coupon aggregate and the coupon evaluator.

``check`` and ``calculate_discount`` are pure: they look at the coupon, the
customer and the order amount and never change state. Usage is recorded
only when an order actually consumes the coupon (``record_usage``).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from grocery.domain import grocery

UNLIMITED = -1


class CouponType(Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"


@dataclass(frozen=True)
class CouponCheck:
    valid: bool
    reason: str


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def naive(value):
    """Drop tzinfo so admin-supplied windows compare with local naive timestamps."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def _format_amount(amount) -> str:
    amount = float(amount)
    return str(int(amount)) if amount.is_integer() else f"{amount:.2f}"


@grocery.entity(part_of="Coupon")
class CouponUsage:
    customer_id = Identifier(required=True)
    order_id = Identifier()
    used_at = DateTime()


@grocery.aggregate
class Coupon:
    code = String(required=True, max_length=30, unique=True)
    description = Text(default="")
    coupon_type = String(choices=CouponType, default=CouponType.PERCENTAGE.value)
    value = Float(required=True, min_value=0.0)
    min_order_amount = Float(default=0.0, min_value=0.0)
    max_discount = Float(min_value=0.0)
    max_usage = Integer(default=UNLIMITED)
    usage_count = Integer(default=0, min_value=0)
    max_usage_per_user = Integer(default=1, min_value=1)
    used_by = HasMany(CouponUsage)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_active = Boolean(default=True)
    created_at = DateTime(default=datetime.now)

    @invariant.post
    def window_must_be_ordered(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": ["End date must be after start date"]})

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.coupon_type == CouponType.PERCENTAGE.value and self.value is not None and self.value > 100:
            raise ValidationError({"value": ["Percentage coupons cannot exceed 100%"]})

    @classmethod
    def create(
        cls,
        code,
        value,
        start_date,
        end_date,
        coupon_type=CouponType.PERCENTAGE.value,
        description=None,
        min_order_amount=0.0,
        max_discount=None,
        max_usage=UNLIMITED,
        max_usage_per_user=1,
    ):
        return cls(
            code=normalize_code(code),
            description=description or "",
            coupon_type=coupon_type,
            value=value,
            min_order_amount=min_order_amount or 0.0,
            max_discount=max_discount,
            max_usage=UNLIMITED if max_usage is None else max_usage,
            max_usage_per_user=max_usage_per_user or 1,
            start_date=naive(start_date),
            end_date=naive(end_date),
            created_at=datetime.now(),
        )

    # -------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------
    def times_used_by(self, customer_id) -> int:
        if customer_id is None:
            return 0
        return len([u for u in self.used_by if str(u.customer_id) == str(customer_id)])

    def check(self, customer_id, order_amount, now=None) -> CouponCheck:
        """Run the eligibility checks in order and report the first failure."""
        now = now or datetime.now()

        if not self.is_active:
            return CouponCheck(False, "Coupon is not active")
        if now < self.start_date:
            return CouponCheck(False, "Coupon not yet active")
        if now > self.end_date:
            return CouponCheck(False, "Coupon has expired")
        if self.max_usage >= 0 and self.usage_count >= self.max_usage:
            return CouponCheck(False, "Coupon usage limit reached")
        if order_amount < self.min_order_amount:
            return CouponCheck(False, f"Minimum order amount is ₹{_format_amount(self.min_order_amount)}")
        if self.times_used_by(customer_id) >= self.max_usage_per_user:
            return CouponCheck(False, "You have already used this coupon")
        return CouponCheck(True, "Coupon is valid")

    def calculate_discount(self, order_amount) -> float:
        if self.coupon_type == CouponType.PERCENTAGE.value:
            discount = order_amount * self.value / 100
            if self.max_discount:
                discount = min(discount, self.max_discount)
        else:
            discount = self.value
        return round(min(discount, order_amount), 2)

    def ensure_applicable(self, customer_id, order_amount, now=None) -> float:
        """Return the discount for ``order_amount`` or raise with the evaluator's reason."""
        result = self.check(customer_id, order_amount, now)
        if not result.valid:
            raise ValidationError({"coupon": [result.reason]})
        return self.calculate_discount(order_amount)

    # -------------------------------------------------------------------
    # Consumption
    # -------------------------------------------------------------------
    def record_usage(self, customer_id, order_id, order_amount, now=None) -> float:
        """Consume one use of the coupon for an order and return its discount."""
        discount = self.ensure_applicable(customer_id, order_amount, now)
        self.usage_count += 1
        self.add_used_by(CouponUsage(customer_id=customer_id, order_id=order_id, used_at=now or datetime.now()))
        return discount

    def update_details(self, **changes):
        with atomic_change(self):
            for field_name, value in changes.items():
                if value is None:
                    continue
                if field_name == "code":
                    value = normalize_code(value)
                elif field_name in ("start_date", "end_date"):
                    value = naive(value)
                setattr(self, field_name, value)

    def deactivate(self):
        self.is_active = False
