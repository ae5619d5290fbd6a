"""Order endpoints: checkout, customer history, and back-office control."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from grocery.api.auth import Principal, current_principal, require_admin
from grocery.api.envelope import ok
from grocery.api.schemas import (
    AssignAgentRequest,
    CancelOrderRequest,
    CartData,
    CartOut,
    CustomerOrderData,
    CustomerOrderOut,
    Envelope,
    OrderData,
    OrderList,
    OrderOut,
    PlaceOrderRequest,
    UpdateOrderStatusRequest,
)
from grocery.cart.queries import cart_for_customer
from grocery.cart.reorder import Reorder
from grocery.delivery.assignment import AssignDeliveryAgent
from grocery.order import queries
from grocery.order.cancellation import CancelOrder
from grocery.order.placement import PlaceOrder
from grocery.order.status import UpdateOrderStatus

router = APIRouter(prefix="/orders", tags=["orders"])


def _order(order_id) -> OrderData:
    return OrderData(order=OrderOut.model_validate(queries.get_order(order_id)))


def _page(orders, pagination) -> OrderList:
    return OrderList(orders=[OrderOut.model_validate(o) for o in orders], pagination=pagination)


@router.post("", status_code=201, response_model=Envelope[OrderData])
async def place_order(body: PlaceOrderRequest, principal: Principal = Depends(current_principal)):
    command = PlaceOrder(
        customer_id=principal.id,
        address_id=body.address_id,
        payment_method=body.payment_method,
        loyalty_points_to_use=body.loyalty_points_to_use,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return ok(_order(order_id), "Order placed successfully")


@router.get("/my-orders", response_model=Envelope[OrderList])
async def my_orders(
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    principal: Principal = Depends(current_principal),
):
    orders, pagination = queries.customer_orders(principal.id, status=status, page=page, limit=limit)
    return ok(_page(orders, pagination))


@router.get("/my-orders/{id_or_number}", response_model=Envelope[CustomerOrderData])
async def my_order(id_or_number: str, principal: Principal = Depends(current_principal)):
    order = queries.customer_order(principal.id, id_or_number)
    return ok(CustomerOrderData(order=CustomerOrderOut.model_validate(order)))


@router.put("/{order_id}/cancel", response_model=Envelope[OrderData])
async def cancel_order(order_id: str, body: CancelOrderRequest, principal: Principal = Depends(current_principal)):
    command = CancelOrder(order_id=order_id, customer_id=principal.id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return ok(_order(order_id), "Order cancelled")


@router.post("/{order_id}/reorder", response_model=Envelope[CartData])
async def reorder(order_id: str, principal: Principal = Depends(current_principal)):
    current_domain.process(Reorder(customer_id=principal.id, order_id=order_id), asynchronous=False)
    return ok(CartData(cart=CartOut.model_validate(cart_for_customer(principal.id))), "Items added to cart")


# --- Admin endpoints ---


@router.get("/admin/all", response_model=Envelope[OrderList], dependencies=[Depends(require_admin)])
async def all_orders(
    status: str | None = None,
    date_from: datetime | None = Query(default=None, alias="from"),
    date_to: datetime | None = Query(default=None, alias="to"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    orders, pagination = queries.all_orders(
        status=status, date_from=date_from, date_to=date_to, page=page, limit=limit
    )
    return ok(_page(orders, pagination))


@router.get("/admin/{order_id}", response_model=Envelope[OrderData], dependencies=[Depends(require_admin)])
async def order_detail(order_id: str):
    return ok(_order(order_id))


@router.put("/admin/{order_id}/status", response_model=Envelope[OrderData], dependencies=[Depends(require_admin)])
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest):
    command = UpdateOrderStatus(order_id=order_id, status=body.status, note=body.note)
    current_domain.process(command, asynchronous=False)
    return ok(_order(order_id), "Order status updated")


@router.put("/admin/{order_id}/assign-agent", response_model=Envelope[OrderData], dependencies=[Depends(require_admin)])
async def assign_agent(order_id: str, body: AssignAgentRequest):
    command = AssignDeliveryAgent(order_id=order_id, agent_id=body.agent_id, note=body.note)
    current_domain.process(command, asynchronous=False)
    return ok(_order(order_id), "Delivery agent assigned")
