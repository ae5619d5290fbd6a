"""Category aggregate: a two-level tree of product groupings."""

from datetime import datetime

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from grocery.domain import grocery
from grocery.shared.slug import slugify


@grocery.aggregate
class Category:
    """A grouping of products shown on the storefront.

    Top-level categories have no parent. A category whose ``parent_id`` is set
    is a subcategory; subcategories cannot have children of their own.
    """

    name: String(required=True, max_length=100, sanitize=False)
    slug: String(required=True, max_length=120, unique=True)
    description: Text(default="")
    image: String(max_length=500)
    parent_id: Identifier()
    is_active: Boolean(default=True)
    sort_order: Integer(default=0)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime(default=datetime.now)

    @classmethod
    def create(cls, name, description=None, image=None, parent_id=None, sort_order=0):
        now = datetime.now()
        return cls(
            name=name,
            slug=slugify(name),
            description=description or "",
            image=image,
            parent_id=parent_id,
            sort_order=sort_order,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    def update_details(self, name=None, description=None, image=None, sort_order=None, is_active=None):
        if name is not None:
            self.name = name
            self.slug = slugify(name)
        if description is not None:
            self.description = description
        if image is not None:
            self.image = image
        if sort_order is not None:
            self.sort_order = sort_order
        if is_active is not None:
            self.is_active = is_active
        self.updated_at = datetime.now()

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now()
