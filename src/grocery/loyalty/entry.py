"""Loyalty ledger entries.

Entries are append-only. The customer's ``loyalty_points`` field is the
running balance and is adjusted in the same unit of work as each insert.
"""

from datetime import datetime
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String

from grocery.domain import grocery


class LoyaltyType(Enum):
    EARNED = "earned"
    REDEEMED = "redeemed"
    EXPIRED = "expired"
    BONUS = "bonus"
    REFUNDED = "refunded"


@grocery.aggregate
class LoyaltyEntry:
    customer_id = Identifier(required=True)
    entry_type = String(required=True, choices=LoyaltyType)
    points = Integer(required=True)  # signed
    order_id = Identifier()
    description = String(max_length=255)
    expires_at = DateTime()
    created_at = DateTime(default=datetime.now)
