"""Public offer and banner listings, plus admin offer management."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from grocery.api.auth import require_admin
from grocery.api.envelope import ok
from grocery.api.schemas import (
    BannerList,
    CreateOfferRequest,
    Envelope,
    MessageResponse,
    OfferCreated,
    OfferList,
    OfferOut,
    UpdateOfferRequest,
)
from grocery.offers.management import CreateOffer, DeleteOffer, UpdateOffer
from grocery.offers.queries import active_offers, list_offers

router = APIRouter(tags=["offers"])


def _offers(offers) -> list[OfferOut]:
    return [OfferOut.model_validate(offer) for offer in offers]


@router.get("/offers/active", response_model=Envelope[OfferList])
async def running_offers():
    return ok(OfferList(offers=_offers(active_offers())))


@router.get("/banners", response_model=Envelope[BannerList])
async def banners():
    return ok(BannerList(banners=_offers(active_offers(banners_only=True))))


@router.get("/offers", response_model=Envelope[OfferList], dependencies=[Depends(require_admin)])
async def all_offers():
    return ok(OfferList(offers=_offers(list_offers())))


@router.post("/offers", status_code=201, response_model=Envelope[OfferCreated], dependencies=[Depends(require_admin)])
async def create_offer(body: CreateOfferRequest):
    offer_id = current_domain.process(CreateOffer(**body.model_dump()), asynchronous=False)
    return ok(OfferCreated(offer_id=offer_id), "Offer created")


@router.put("/offers/{offer_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def update_offer(offer_id: str, body: UpdateOfferRequest):
    current_domain.process(UpdateOffer(offer_id=offer_id, **body.model_dump()), asynchronous=False)
    return ok(message="Offer updated")


@router.delete("/offers/{offer_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
async def delete_offer(offer_id: str):
    current_domain.process(DeleteOffer(offer_id=offer_id), asynchronous=False)
    return ok(message="Offer deleted")
