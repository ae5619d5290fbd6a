"""Read-side helpers for the storefront catalogue.

Listings read the aggregates directly; the catalogue is small enough that
no projection is kept.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from grocery.catalogue.category import Category
from grocery.catalogue.product import Product, ProductSort
from grocery.shared.pagination import page_window, pagination_meta

_SORT_ORDERING = {
    ProductSort.NEWEST: "-created_at",
    ProductSort.PRICE_ASC: "price",
    ProductSort.PRICE_DESC: "-price",
    ProductSort.NAME: "name",
    ProductSort.POPULAR: "-total_sold",
    ProductSort.RATING: "-rating_average",
}


def list_products(
    category=None,
    subcategory=None,
    brand=None,
    min_price=None,
    max_price=None,
    search=None,
    featured=None,
    popular=None,
    sort=ProductSort.NEWEST.value,
    page=1,
    limit=20,
):
    """Return ``(products, pagination)`` for active products matching the filters."""
    try:
        ordering = _SORT_ORDERING[ProductSort(sort or ProductSort.NEWEST.value)]
    except ValueError:
        raise ValidationError({"sort": [f"Unknown sort option '{sort}'"]}) from None

    query = current_domain.repository_for(Product)._dao.query.filter(is_active=True)
    if category:
        query = query.filter(category_id=category)
    if subcategory:
        query = query.filter(subcategory_id=subcategory)
    if brand:
        query = query.filter(brand=brand)
    if min_price is not None:
        query = query.filter(price__gte=min_price)
    if max_price is not None:
        query = query.filter(price__lte=max_price)
    if featured:
        query = query.filter(is_featured=True)
    if popular:
        query = query.filter(is_popular=True)
    if search:
        query = query.filter(Q(name__icontains=search) | Q(brand__icontains=search))

    offset, limit = page_window(page, limit)
    results = query.order_by(ordering).offset(offset).limit(limit).all()
    return results.items, pagination_meta(page, limit, results.total)


def featured_products(limit=12):
    return (
        current_domain.repository_for(Product)
        ._dao.query.filter(is_active=True, is_featured=True)
        .order_by("-created_at")
        .limit(limit)
        .all()
        .items
    )


def popular_products(limit=12):
    return (
        current_domain.repository_for(Product)
        ._dao.query.filter(is_active=True)
        .order_by("-total_sold")
        .limit(limit)
        .all()
        .items
    )


def low_stock_products():
    """Active products at or below their low-stock threshold, scarcest first."""
    products = (
        current_domain.repository_for(Product)._dao.query.filter(is_active=True).order_by("stock").all().items
    )
    return [p for p in products if p.is_low_stock]


def get_product(id_or_slug):
    """Fetch an active product by slug or id."""
    repo = current_domain.repository_for(Product)
    by_slug = repo._dao.query.filter(slug=id_or_slug, is_active=True).all().items
    if by_slug:
        return by_slug[0]

    try:
        product = repo.get(id_or_slug)
    except ObjectNotFoundError:
        product = None
    if product is None or not product.is_active:
        raise ObjectNotFoundError("Product not found")
    return product


def subcategories_of(category_id):
    return (
        current_domain.repository_for(Category)
        ._dao.query.filter(parent_id=category_id, is_active=True)
        .order_by("sort_order")
        .all()
        .items
    )


def list_categories():
    """Active top-level categories with their active subcategories."""
    active = (
        current_domain.repository_for(Category)._dao.query.filter(is_active=True).order_by("sort_order").all().items
    )
    top_level = [category for category in active if category.is_top_level]
    return [(category, subcategories_of(category.id)) for category in top_level]


def get_category(id_or_slug):
    """Fetch an active category by slug or id, with its active subcategories."""
    repo = current_domain.repository_for(Category)
    by_slug = repo._dao.query.filter(slug=id_or_slug, is_active=True).all().items
    if by_slug:
        category = by_slug[0]
    else:
        try:
            category = repo.get(id_or_slug)
        except ObjectNotFoundError:
            category = None
        if category is None or not category.is_active:
            raise ObjectNotFoundError("Category not found")
    return category, subcategories_of(category.id)
