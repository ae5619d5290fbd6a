"""Profile, address book and loyalty endpoints, plus admin customer management."""

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from grocery.api.auth import Principal, current_principal, require_admin
from grocery.api.envelope import ok
from grocery.api.schemas import (
    AddressList,
    AddressOut,
    AddressRequest,
    BonusPointsRequest,
    CustomerOut,
    Envelope,
    LoyaltyBalance,
    LoyaltyEntryOut,
    LoyaltyHistory,
    MessageResponse,
    UpdateAddressRequest,
    UpdateProfileRequest,
    UserData,
    UserList,
)
from grocery.identity.addresses import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from grocery.identity.queries import get_customer, list_customers
from grocery.identity.registration import ActivateCustomer, DeactivateCustomer, UpdateProfile
from grocery.loyalty.bonus import GrantBonusPoints
from grocery.loyalty.ledger import loyalty_history

customer_router = APIRouter(prefix="/users", tags=["customers"])
address_router = APIRouter(prefix="/addresses", tags=["addresses"])
loyalty_router = APIRouter(prefix="/loyalty", tags=["loyalty"])


# --- Profile ---


def _user(customer_id) -> UserData:
    return UserData(user=CustomerOut.model_validate(get_customer(customer_id)))


@customer_router.get("/profile", response_model=Envelope[UserData])
async def get_profile(principal: Principal = Depends(current_principal)):
    return ok(_user(principal.id))


@customer_router.put("/profile", response_model=Envelope[UserData])
async def update_profile(body: UpdateProfileRequest, principal: Principal = Depends(current_principal)):
    current_domain.process(
        UpdateProfile(customer_id=principal.id, name=body.name, email=body.email), asynchronous=False
    )
    return ok(_user(principal.id), "Profile updated")


@customer_router.get("/admin/all", response_model=Envelope[UserList], dependencies=[Depends(require_admin)])
async def all_customers(
    role: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
):
    customers, pagination = list_customers(role=role, is_active=is_active, search=search, page=page, limit=limit)
    return ok(UserList(users=[CustomerOut.model_validate(c) for c in customers], pagination=pagination))


@customer_router.put(
    "/admin/{customer_id}/deactivate", response_model=MessageResponse, dependencies=[Depends(require_admin)]
)
async def deactivate_customer(customer_id: str):
    current_domain.process(DeactivateCustomer(customer_id=customer_id), asynchronous=False)
    return ok(message="User deactivated")


@customer_router.put("/admin/{customer_id}/activate", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def activate_customer(customer_id: str):
    current_domain.process(ActivateCustomer(customer_id=customer_id), asynchronous=False)
    return ok(message="User activated")


# --- Addresses ---


def _addresses(customer_id) -> AddressList:
    return AddressList(addresses=[AddressOut.model_validate(a) for a in get_customer(customer_id).addresses])


@address_router.get("", response_model=Envelope[AddressList])
async def list_addresses(principal: Principal = Depends(current_principal)):
    return ok(_addresses(principal.id))


@address_router.post("", status_code=201, response_model=Envelope[AddressList])
async def add_address(body: AddressRequest, principal: Principal = Depends(current_principal)):
    command = AddAddress(customer_id=principal.id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(_addresses(principal.id), "Address added")


@address_router.put("/{address_id}", response_model=Envelope[AddressList])
async def update_address(address_id: str, body: UpdateAddressRequest, principal: Principal = Depends(current_principal)):
    command = UpdateAddress(customer_id=principal.id, address_id=address_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(_addresses(principal.id), "Address updated")


@address_router.delete("/{address_id}", response_model=Envelope[AddressList])
async def remove_address(address_id: str, principal: Principal = Depends(current_principal)):
    current_domain.process(RemoveAddress(customer_id=principal.id, address_id=address_id), asynchronous=False)
    return ok(_addresses(principal.id), "Address deleted")


@address_router.put("/{address_id}/default", response_model=Envelope[AddressList])
async def set_default_address(address_id: str, principal: Principal = Depends(current_principal)):
    current_domain.process(SetDefaultAddress(customer_id=principal.id, address_id=address_id), asynchronous=False)
    return ok(_addresses(principal.id), "Default address updated")


# --- Loyalty ---


@loyalty_router.get("/history", response_model=Envelope[LoyaltyHistory])
async def history(principal: Principal = Depends(current_principal)):
    customer = get_customer(principal.id)
    entries = [LoyaltyEntryOut.model_validate(e) for e in loyalty_history(customer.id)]
    return ok(LoyaltyHistory(balance=customer.loyalty_points, history=entries))


@loyalty_router.post("/bonus", status_code=201, response_model=Envelope[LoyaltyBalance], dependencies=[Depends(require_admin)])
async def grant_bonus(body: BonusPointsRequest):
    command = GrantBonusPoints(customer_id=body.customer_id, points=body.points, description=body.description)
    current_domain.process(command, asynchronous=False)
    return ok(LoyaltyBalance(balance=get_customer(body.customer_id).loyalty_points), "Bonus points granted")
