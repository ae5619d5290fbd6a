"""BDD tests for cancellation and back-office status changes."""

from grocery.order.cancellation import CancelOrder
from grocery.order.status import UpdateOrderStatus
from pytest_bdd import parsers, scenarios, when

scenarios("features/order_lifecycle.feature")


@when(parsers.cfparse('the customer cancels the order because "{reason}"'))
def _(attempt, order_id, customer_id, reason):
    attempt(CancelOrder(order_id=order_id, customer_id=customer_id, reason=reason))


@when(parsers.cfparse('the store moves the order to "{status}"'))
def _(attempt, order_id, status):
    attempt(UpdateOrderStatus(order_id=order_id, status=status))
