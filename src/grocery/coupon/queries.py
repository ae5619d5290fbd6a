from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from grocery.coupon.coupon import Coupon, normalize_code


def find_coupon(code) -> Coupon:
    matches = current_domain.repository_for(Coupon)._dao.query.filter(code=normalize_code(code)).all().items
    if not matches:
        raise ObjectNotFoundError("Invalid coupon code")
    return matches[0]


def preview_coupon(code, order_amount, customer_id=None) -> dict:
    """Evaluate a coupon against an amount without consuming it."""
    coupon = find_coupon(code)
    result = coupon.check(customer_id, order_amount)
    return {
        "valid": result.valid,
        "reason": result.reason,
        "code": coupon.code,
        "discount": coupon.calculate_discount(order_amount) if result.valid else 0,
    }


def list_coupons():
    return current_domain.repository_for(Coupon)._dao.query.order_by("-created_at").all().items
