"""Payment gateway callbacks. Signature verification is left to the gateway adapter."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from grocery.api.auth import Principal, current_principal
from grocery.api.envelope import ok
from grocery.api.schemas import (
    ConfirmPaymentRequest,
    CustomerOrderData,
    CustomerOrderOut,
    Envelope,
    MessageResponse,
    PaymentFailureRequest,
)
from grocery.order.payment import ConfirmPayment, RecordPaymentFailure
from grocery.order.queries import customer_order

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/confirm", response_model=Envelope[CustomerOrderData])
async def confirm_payment(body: ConfirmPaymentRequest, principal: Principal = Depends(current_principal)):
    order = customer_order(principal.id, body.order_id)
    current_domain.process(ConfirmPayment(order_id=order.id, payment_id=body.payment_id), asynchronous=False)
    order = customer_order(principal.id, body.order_id)
    return ok(CustomerOrderData(order=CustomerOrderOut.model_validate(order)), "Payment confirmed")


@router.post("/failed", response_model=MessageResponse)
async def payment_failed(body: PaymentFailureRequest, principal: Principal = Depends(current_principal)):
    order = customer_order(principal.id, body.order_id)
    current_domain.process(RecordPaymentFailure(order_id=order.id), asynchronous=False)
    return ok(message="Payment failure recorded")
