"""Coupon preview and admin coupon management."""

from fastapi import APIRouter, Depends
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from grocery.api.auth import Principal, optional_principal, require_admin
from grocery.api.envelope import ok
from grocery.api.schemas import (
    CouponCreated,
    CouponList,
    CouponOut,
    CouponPreviewOut,
    CreateCouponRequest,
    Envelope,
    MessageResponse,
    UpdateCouponRequest,
    ValidateCouponRequest,
)
from grocery.coupon.management import CreateCoupon, DeactivateCoupon, UpdateCoupon
from grocery.coupon.queries import list_coupons, preview_coupon

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post("/validate", response_model=Envelope[CouponPreviewOut])
async def validate_coupon(body: ValidateCouponRequest, principal: Principal | None = Depends(optional_principal)):
    result = preview_coupon(body.code, body.order_amount, principal.id if principal else None)
    if not result["valid"]:
        raise ValidationError({"coupon": [result["reason"]]})
    return ok(CouponPreviewOut(code=result["code"], discount=result["discount"]), result["reason"])


@router.get("", response_model=Envelope[CouponList], dependencies=[Depends(require_admin)])
async def all_coupons():
    return ok(CouponList(coupons=[CouponOut.model_validate(coupon) for coupon in list_coupons()]))


@router.post("", status_code=201, response_model=Envelope[CouponCreated], dependencies=[Depends(require_admin)])
async def create_coupon(body: CreateCouponRequest):
    coupon_id = current_domain.process(CreateCoupon(**body.model_dump()), asynchronous=False)
    return ok(CouponCreated(coupon_id=coupon_id), "Coupon created")


@router.put("/{coupon_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def update_coupon(coupon_id: str, body: UpdateCouponRequest):
    current_domain.process(UpdateCoupon(coupon_id=coupon_id, **body.model_dump()), asynchronous=False)
    return ok(message="Coupon updated")


@router.delete("/{coupon_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_coupon(coupon_id: str):
    current_domain.process(DeactivateCoupon(coupon_id=coupon_id), asynchronous=False)
    return ok(message="Coupon deleted")
