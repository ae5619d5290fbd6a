"""Order lookups for customers, agents and the back office."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from grocery.order.order import Order
from grocery.shared.pagination import page_window, pagination_meta


def _orders():
    return current_domain.repository_for(Order)._dao.query


def customer_orders(customer_id, status=None, page=1, limit=10):
    """A customer's orders, newest first. Returns ``(orders, pagination)``."""
    query = _orders().filter(customer_id=customer_id)
    if status:
        query = query.filter(status=status)
    offset, limit = page_window(page, limit)
    results = query.order_by("-created_at").offset(offset).limit(limit).all()
    return results.items, pagination_meta(page, limit, results.total)


def customer_order(customer_id, id_or_number):
    """Fetch one of the customer's orders by id or order number."""
    by_number = _orders().filter(order_number=id_or_number).all().items
    if by_number:
        order = by_number[0]
    else:
        try:
            order = current_domain.repository_for(Order).get(id_or_number)
        except ObjectNotFoundError:
            order = None
    if order is None or not order.belongs_to(customer_id):
        raise ObjectNotFoundError("Order not found")
    return order


def all_orders(status=None, date_from=None, date_to=None, page=1, limit=20):
    query = _orders()
    if status:
        query = query.filter(status=status)
    if date_from is not None:
        query = query.filter(created_at__gte=date_from)
    if date_to is not None:
        query = query.filter(created_at__lte=date_to)
    offset, limit = page_window(page, limit)
    results = query.order_by("-created_at").offset(offset).limit(limit).all()
    return results.items, pagination_meta(page, limit, results.total)


def agent_orders(agent_id, limit=20):
    """Orders handled by a delivery agent, latest first."""
    return _orders().filter(delivery_agent_id=agent_id).order_by("-updated_at").limit(limit).all().items


def get_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError("Order not found") from None
