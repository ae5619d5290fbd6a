from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from grocery.identity.customer import Customer
from grocery.shared.pagination import page_window, pagination_meta


def get_customer(customer_id) -> Customer:
    try:
        return current_domain.repository_for(Customer).get(customer_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError("User not found") from None


def list_customers(role=None, is_active=None, search=None, page=1, limit=20):
    """Customers for the back office, newest first. Returns ``(customers, pagination)``."""
    query = current_domain.repository_for(Customer)._dao.query
    if role:
        query = query.filter(role=role)
    if is_active is not None:
        query = query.filter(is_active=is_active)
    if search:
        query = query.filter(Q(name__icontains=search) | Q(phone__icontains=search))
    offset, limit = page_window(page, limit)
    results = query.order_by("-created_at").offset(offset).limit(limit).all()
    return results.items, pagination_meta(page, limit, results.total)
