"""Admin coupon management."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from grocery.coupon.coupon import Coupon, CouponType, normalize_code
from grocery.domain import grocery


@grocery.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=30)
    description = Text()
    coupon_type = String(choices=CouponType, default=CouponType.PERCENTAGE.value)
    value = Float(required=True, min_value=0.0)
    min_order_amount = Float(default=0.0, min_value=0.0)
    max_discount = Float(min_value=0.0)
    max_usage = Integer(default=-1)
    max_usage_per_user = Integer(default=1, min_value=1)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)


@grocery.command(part_of="Coupon")
class UpdateCoupon:
    coupon_id = Identifier(required=True)
    code = String(max_length=30)
    description = Text()
    value = Float(min_value=0.0)
    min_order_amount = Float(min_value=0.0)
    max_discount = Float(min_value=0.0)
    max_usage = Integer()
    max_usage_per_user = Integer(min_value=1)
    start_date = DateTime()
    end_date = DateTime()
    is_active = Boolean()


@grocery.command(part_of="Coupon")
class DeactivateCoupon:
    coupon_id = Identifier(required=True)


def _ensure_code_free(code, coupon_id=None):
    existing = current_domain.repository_for(Coupon)._dao.query.filter(code=normalize_code(code)).all().items
    if any(str(c.id) != str(coupon_id) for c in existing):
        raise ValidationError({"code": ["Coupon code already exists"]})


@grocery.command_handler(part_of=Coupon)
class CouponManagementHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        _ensure_code_free(command.code)
        coupon = Coupon.create(
            code=command.code,
            value=command.value,
            start_date=command.start_date,
            end_date=command.end_date,
            coupon_type=command.coupon_type,
            description=command.description,
            min_order_amount=command.min_order_amount,
            max_discount=command.max_discount,
            max_usage=command.max_usage,
            max_usage_per_user=command.max_usage_per_user,
        )
        current_domain.repository_for(Coupon).add(coupon)
        return str(coupon.id)

    @handle(UpdateCoupon)
    def update_coupon(self, command):
        if command.code:
            _ensure_code_free(command.code, command.coupon_id)

        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)
        coupon.update_details(
            code=command.code,
            description=command.description,
            value=command.value,
            min_order_amount=command.min_order_amount,
            max_discount=command.max_discount,
            max_usage=command.max_usage,
            max_usage_per_user=command.max_usage_per_user,
            start_date=command.start_date,
            end_date=command.end_date,
            is_active=command.is_active,
        )
        repo.add(coupon)

    @handle(DeactivateCoupon)
    def deactivate_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)
        coupon.deactivate()
        repo.add(coupon)
