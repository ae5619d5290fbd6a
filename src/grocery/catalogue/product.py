"""Product aggregate root with Variant entity.

Stock only moves through ``withdraw_stock`` (order placement) and
``restore_stock`` (order cancellation), and never drops below zero.
"""

import math
from datetime import datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, List, String, Text

from grocery.domain import grocery
from grocery.settings import DEFAULT_LOW_STOCK_THRESHOLD
from grocery.shared.slug import slugify


class ProductSort(Enum):
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME = "name"
    POPULAR = "popular"
    RATING = "rating"


def discount_percent(price, mrp) -> int:
    """Percentage off MRP, rounded half-up. Zero when there is no markdown."""
    if not mrp or price is None or price >= mrp:
        return 0
    return int(math.floor((mrp - price) / mrp * 100 + 0.5))


@grocery.entity(part_of="Product")
class Variant:
    """A purchasable size or pack of a product, e.g. ``Weight: 500g``."""

    name: String(required=True, max_length=50, sanitize=False)
    value: String(required=True, max_length=50, sanitize=False)
    price: Float(required=True, min_value=0.0)
    mrp: Float(min_value=0.0)
    stock: Integer(default=0, min_value=0)


@grocery.aggregate
class Product:
    name: String(required=True, max_length=200, sanitize=False)
    slug: String(required=True, max_length=220, unique=True)
    description: Text(default="")
    brand: String(max_length=100, default="", sanitize=False)
    unit: String(max_length=30, default="piece")
    price: Float(required=True, min_value=0.0)
    mrp: Float(min_value=0.0)
    discount: Integer(default=0, min_value=0, max_value=100)
    stock: Integer(default=0, min_value=0)
    low_stock_threshold: Integer(default=DEFAULT_LOW_STOCK_THRESHOLD, min_value=0)
    category_id: Identifier()
    subcategory_id: Identifier()
    variants: HasMany(Variant)
    images: List(content_type=String)
    tags: List(content_type=String)
    is_active: Boolean(default=True)
    is_featured: Boolean(default=False)
    is_popular: Boolean(default=False)
    total_sold: Integer(default=0, min_value=0)
    rating_average: Float(default=0.0, min_value=0.0, max_value=5.0)
    rating_count: Integer(default=0, min_value=0)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @invariant.post
    def price_cannot_exceed_mrp(self):
        if self.mrp and self.price is not None and self.price > self.mrp:
            raise ValidationError({"price": ["Price cannot be greater than MRP"]})

    @classmethod
    def create(
        cls,
        name,
        price,
        mrp=None,
        stock=0,
        category_id=None,
        subcategory_id=None,
        description=None,
        brand=None,
        unit=None,
        low_stock_threshold=None,
        images=None,
        tags=None,
        variants=None,
        is_featured=False,
        is_popular=False,
    ):
        now = datetime.now()
        product = cls(
            name=name,
            slug=slugify(name),
            description=description or "",
            brand=brand or "",
            unit=unit or "piece",
            price=price,
            mrp=mrp if mrp is not None else price,
            discount=discount_percent(price, mrp),
            stock=stock,
            low_stock_threshold=(
                low_stock_threshold if low_stock_threshold is not None else DEFAULT_LOW_STOCK_THRESHOLD
            ),
            category_id=category_id,
            subcategory_id=subcategory_id,
            images=images or [],
            tags=tags or [],
            is_featured=is_featured,
            is_popular=is_popular,
            created_at=now,
            updated_at=now,
        )
        for variant in variants or []:
            product.add_variants(Variant(**variant))
        return product

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply a partial update. ``None`` values are ignored."""
        changes = {key: value for key, value in changes.items() if value is not None}
        variants = changes.pop("variants", None)

        with atomic_change(self):
            for field_name, value in changes.items():
                setattr(self, field_name, value)

            if "name" in changes:
                self.slug = slugify(self.name)
            if "price" in changes or "mrp" in changes:
                self.discount = discount_percent(self.price, self.mrp)

        if variants is not None:
            for existing in list(self.variants):
                self.remove_variants(existing)
            for variant in variants:
                self.add_variants(Variant(**variant))

        self.updated_at = datetime.now()

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now()

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else ""

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.low_stock_threshold

    def find_variant(self, name, value):
        return next((v for v in self.variants if v.name == name and v.value == value), None)

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def ensure_available(self, quantity):
        if not self.is_active:
            raise ValidationError({"product": [f'Product "{self.name}" is no longer available']})
        if self.stock < quantity:
            raise ValidationError({"stock": [f'Insufficient stock for "{self.name}"']})

    def withdraw_stock(self, quantity):
        self.ensure_available(quantity)
        self.stock -= quantity
        self.total_sold += quantity
        self.updated_at = datetime.now()

    def restore_stock(self, quantity):
        self.stock += quantity
        self.total_sold = max(0, self.total_sold - quantity)
        self.updated_at = datetime.now()
