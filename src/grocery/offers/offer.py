"""Offer aggregate: storefront promotions and home-page banners."""

from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from grocery.coupon.coupon import naive
from grocery.domain import grocery


class OfferType(Enum):
    PERCENTAGE = "percentage"
    FLAT = "flat"
    BOGO = "bogo"
    FREE_DELIVERY = "free_delivery"


@grocery.aggregate
class Offer:
    title = String(required=True, max_length=200, sanitize=False)
    description = Text()
    offer_type = String(required=True, choices=OfferType)
    value = Float(required=True, min_value=0.0)
    min_order_amount = Float(default=0.0, min_value=0.0)
    max_discount = Float(min_value=0.0)
    image = String(max_length=500)
    banner_image = String(max_length=500)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_active = Boolean(default=True)
    is_banner = Boolean(default=False)
    sort_order = Integer(default=0)
    created_at = DateTime(default=datetime.now)

    @invariant.post
    def window_must_be_ordered(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError({"end_date": ["End date must be after start date"]})

    @classmethod
    def create(cls, title, offer_type, value, start_date, end_date, **details):
        return cls(
            title=title,
            offer_type=offer_type,
            value=value,
            start_date=naive(start_date),
            end_date=naive(end_date),
            created_at=datetime.now(),
            **details,
        )

    def is_running(self, now=None) -> bool:
        now = now or datetime.now()
        return self.is_active and self.start_date <= now <= self.end_date

    def update_details(self, **changes):
        for field in ("start_date", "end_date"):
            if changes.get(field) is not None:
                changes[field] = naive(changes[field])
        with atomic_change(self):
            for field, value in changes.items():
                if value is not None:
                    setattr(self, field, value)

    def deactivate(self):
        self.is_active = False
