from protean.utils.globals import current_domain

from grocery.cart.cart import Cart


def find_cart(customer_id):
    carts = current_domain.repository_for(Cart)._dao.query.filter(customer_id=customer_id).all().items
    return carts[0] if carts else None


def cart_for_customer(customer_id) -> Cart:
    """The customer's cart, or a fresh unsaved one on first access."""
    return find_cart(customer_id) or Cart.create(customer_id=customer_id)
