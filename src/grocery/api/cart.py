"""Cart endpoints for the signed-in customer."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from grocery.api.auth import Principal, current_principal
from grocery.api.envelope import ok
from grocery.api.schemas import (
    AddToCartRequest,
    ApplyCouponRequest,
    CartData,
    CartOut,
    Envelope,
    UpdateCartItemRequest,
)
from grocery.cart.coupons import ApplyCartCoupon, RemoveCartCoupon
from grocery.cart.items import AddToCart, ClearCart, RemoveCartItem, UpdateCartItem
from grocery.cart.queries import cart_for_customer

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart(principal: Principal) -> CartData:
    return CartData(cart=CartOut.model_validate(cart_for_customer(principal.id)))


@router.get("", response_model=Envelope[CartData])
async def get_cart(principal: Principal = Depends(current_principal)):
    return ok(_cart(principal))


@router.post("/add", response_model=Envelope[CartData])
async def add_to_cart(body: AddToCartRequest, principal: Principal = Depends(current_principal)):
    command = AddToCart(
        customer_id=principal.id,
        product_id=body.product_id,
        quantity=body.quantity,
        variant_name=body.variant.name if body.variant else None,
        variant_value=body.variant.value if body.variant else None,
    )
    current_domain.process(command, asynchronous=False)
    return ok(_cart(principal), "Item added to cart")


@router.put("/item/{item_id}", response_model=Envelope[CartData])
async def update_cart_item(item_id: str, body: UpdateCartItemRequest, principal: Principal = Depends(current_principal)):
    command = UpdateCartItem(customer_id=principal.id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return ok(_cart(principal), "Cart updated")


@router.delete("/item/{item_id}", response_model=Envelope[CartData])
async def remove_cart_item(item_id: str, principal: Principal = Depends(current_principal)):
    current_domain.process(RemoveCartItem(customer_id=principal.id, item_id=item_id), asynchronous=False)
    return ok(_cart(principal), "Item removed from cart")


@router.delete("/clear", response_model=Envelope[CartData])
async def clear_cart(principal: Principal = Depends(current_principal)):
    current_domain.process(ClearCart(customer_id=principal.id), asynchronous=False)
    return ok(_cart(principal), "Cart cleared")


@router.post("/coupon/apply", response_model=Envelope[CartData])
async def apply_coupon(body: ApplyCouponRequest, principal: Principal = Depends(current_principal)):
    current_domain.process(ApplyCartCoupon(customer_id=principal.id, code=body.code), asynchronous=False)
    return ok(_cart(principal), "Coupon applied")


@router.delete("/coupon/remove", response_model=Envelope[CartData])
async def remove_coupon(principal: Principal = Depends(current_principal)):
    current_domain.process(RemoveCartCoupon(customer_id=principal.id), asynchronous=False)
    return ok(_cart(principal), "Coupon removed")
