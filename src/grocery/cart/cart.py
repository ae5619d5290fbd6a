"""Cart aggregate: one per customer, emptied (never deleted) at checkout.

Lines are keyed by (product, variant). Adding a product/variant pair that
is already in the cart grows the existing line instead of appending a new
one. Subtotal and item count are always computed from the lines.
"""

from datetime import datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from grocery.domain import grocery


@grocery.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    variant_name = String(max_length=50, sanitize=False)
    variant_value = String(max_length=50, sanitize=False)
    variant_price = Float(min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)

    @property
    def unit_price(self) -> float:
        return self.variant_price or self.price

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def matches(self, product_id, variant_name=None, variant_value=None, variant_price=None) -> bool:
        return (
            str(self.product_id) == str(product_id)
            and self.variant_name == variant_name
            and self.variant_value == variant_value
            and self.variant_price == variant_price
        )


@grocery.aggregate
class Cart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    coupon_id = Identifier()
    coupon_code = String(max_length=30)
    coupon_discount = Float(default=0.0, min_value=0.0)
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        return cls(customer_id=customer_id, updated_at=datetime.now())

    @property
    def subtotal(self) -> float:
        return round(sum(item.line_total for item in self.items), 2)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def _touch(self):
        self.updated_at = datetime.now()

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, price, variant_name=None, variant_value=None, variant_price=None):
        """Add a line, or grow the matching line and refresh its price."""
        existing = next(
            (i for i in self.items if i.matches(product_id, variant_name, variant_value, variant_price)),
            None,
        )
        if existing:
            existing.quantity += quantity
            existing.price = price
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                variant_name=variant_name,
                variant_value=variant_value,
                variant_price=variant_price,
                quantity=quantity,
                price=price,
            )
            self.add_items(item)

        self._touch()
        return item

    def set_quantity(self, product_id, quantity, price, variant_name=None, variant_value=None, variant_price=None):
        """Replace the quantity of the product's line, adding the line if absent."""
        existing = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        if existing:
            existing.quantity = quantity
            self._touch()
            return existing
        return self.add_item(product_id, quantity, price, variant_name, variant_value, variant_price)

    def update_item(self, item_id, quantity):
        """Change a line's quantity. Zero or less removes the line."""
        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})

        if quantity <= 0:
            self.remove_items(item)
        else:
            item.quantity = quantity
        self._touch()

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        self.remove_items(item)
        self._touch()

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self.remove_coupon()

    # -------------------------------------------------------------------
    # Coupon
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon_id, code, discount):
        if self.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})
        self.coupon_id = coupon_id
        self.coupon_code = code
        self.coupon_discount = discount
        self._touch()

    def remove_coupon(self):
        self.coupon_id = None
        self.coupon_code = None
        self.coupon_discount = 0.0
        self._touch()
