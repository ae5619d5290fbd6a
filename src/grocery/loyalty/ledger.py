"""Loyalty arithmetic and ledger postings.

Posting helpers mutate the customer balance and register the ledger entry
with the repository. They are called from command handlers, so both writes
commit in the handler's unit of work.
"""

import math
from datetime import datetime

import structlog
from protean.utils.globals import current_domain

from grocery.loyalty.entry import LoyaltyEntry, LoyaltyType
from grocery.settings import POINTS_PER_RUPEE_REDEEMED, RUPEES_PER_POINT_EARNED

logger = structlog.get_logger(__name__)


def points_for_amount(amount) -> int:
    """Points earned for spending ``amount`` rupees: one per ₹10, rounded down."""
    return int(math.floor(amount / RUPEES_PER_POINT_EARNED)) if amount > 0 else 0


def rupees_for_points(points) -> float:
    """Discount value of ``points``: ten points are worth ₹1."""
    return points / POINTS_PER_RUPEE_REDEEMED


def _post(customer, entry_type, points, order_id, description):
    customer.adjust_loyalty_points(points)
    entry = LoyaltyEntry(
        customer_id=customer.id,
        entry_type=entry_type.value,
        points=points,
        order_id=order_id,
        description=description,
        created_at=datetime.now(),
    )
    current_domain.repository_for(LoyaltyEntry).add(entry)
    logger.info(
        "loyalty entry posted",
        customer_id=str(customer.id),
        entry_type=entry_type.value,
        points=points,
        balance=customer.loyalty_points,
    )
    return entry


def grant_points(customer, order_id, order_number, amount):
    """Grant points for an order. Returns the entry, or None when nothing is earned."""
    points = points_for_amount(amount)
    if points <= 0:
        return None
    return _post(customer, LoyaltyType.EARNED, points, order_id, f"Earned {points} points for order {order_number}")


def redeem_points(customer, order_id, order_number, points):
    return _post(
        customer,
        LoyaltyType.REDEEMED,
        -points,
        order_id,
        f"Redeemed {points} points for order {order_number}",
    )


def refund_points(customer, order_id, points):
    return _post(
        customer,
        LoyaltyType.REFUNDED,
        points,
        order_id,
        f"Refunded {points} points for cancelled order",
    )


def loyalty_history(customer_id, limit=50):
    return (
        current_domain.repository_for(LoyaltyEntry)
        ._dao.query.filter(customer_id=customer_id)
        .order_by("-created_at")
        .limit(limit)
        .all()
        .items
    )


def bonus_points(customer, points, description=None):
    return _post(customer, LoyaltyType.BONUS, points, None, description or f"Bonus {points} points")
