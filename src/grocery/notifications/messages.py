"""Titles and bodies for notifications raised by order and partner events."""

from grocery.order.order import OrderStatus

_ORDER_STATUS_MESSAGES = {
    OrderStatus.CONFIRMED: ("Order confirmed", "Your order {number} has been confirmed."),
    OrderStatus.PREPARING: ("Order being prepared", "We are packing your order {number}."),
    OrderStatus.OUT_FOR_DELIVERY: ("Out for delivery", "Your order {number} is on its way."),
    OrderStatus.PICKED_UP: ("Order picked up", "The delivery partner has picked up order {number}."),
    OrderStatus.ARRIVED: ("Delivery partner arrived", "Your delivery partner has arrived with order {number}."),
    OrderStatus.DELIVERED: ("Order delivered", "Order {number} has been delivered. Enjoy!"),
    OrderStatus.CANCELLED: ("Order cancelled", "Your order {number} has been cancelled."),
    OrderStatus.REFUNDED: ("Order refunded", "The refund for order {number} has been processed."),
}


def order_placed(order_number, total_amount) -> tuple[str, str]:
    return "Order placed", f"Your order {order_number} for ₹{total_amount:.2f} has been placed."


def order_status(order_number, status) -> tuple[str, str] | None:
    """Message for an order status change, or None when nothing is sent."""
    template = _ORDER_STATUS_MESSAGES.get(OrderStatus(status))
    if template is None:
        return None
    title, body = template
    return title, body.format(number=order_number)


def payment_received(order_number, amount) -> tuple[str, str]:
    return "Payment received", f"We received ₹{amount:.2f} for order {order_number}."


def partner_application(status) -> tuple[str, str]:
    if status == "approved":
        return "Application approved", "Welcome aboard! You can now go online and accept deliveries."
    return "Application rejected", "Your delivery partner application was not approved."
