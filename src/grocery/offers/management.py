"""Admin offer management."""

from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from grocery.domain import grocery
from grocery.offers.offer import Offer, OfferType


@grocery.command(part_of="Offer")
class CreateOffer:
    title = String(required=True, max_length=200, sanitize=False)
    description = Text()
    offer_type = String(required=True, choices=OfferType)
    value = Float(required=True, min_value=0.0)
    min_order_amount = Float(default=0.0, min_value=0.0)
    max_discount = Float(min_value=0.0)
    image = String(max_length=500)
    banner_image = String(max_length=500)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_banner = Boolean(default=False)
    sort_order = Integer(default=0)


@grocery.command(part_of="Offer")
class UpdateOffer:
    offer_id = Identifier(required=True)
    title = String(max_length=200, sanitize=False)
    description = Text()
    value = Float(min_value=0.0)
    min_order_amount = Float(min_value=0.0)
    max_discount = Float(min_value=0.0)
    image = String(max_length=500)
    banner_image = String(max_length=500)
    start_date = DateTime()
    end_date = DateTime()
    is_active = Boolean()
    is_banner = Boolean()
    sort_order = Integer()


@grocery.command(part_of="Offer")
class DeleteOffer:
    offer_id = Identifier(required=True)


@grocery.command_handler(part_of=Offer)
class OfferManagementHandler:
    @handle(CreateOffer)
    def create_offer(self, command):
        offer = Offer.create(
            title=command.title,
            offer_type=command.offer_type,
            value=command.value,
            start_date=command.start_date,
            end_date=command.end_date,
            description=command.description,
            min_order_amount=command.min_order_amount,
            max_discount=command.max_discount,
            image=command.image,
            banner_image=command.banner_image,
            is_banner=command.is_banner,
            sort_order=command.sort_order,
        )
        current_domain.repository_for(Offer).add(offer)
        return str(offer.id)

    @handle(UpdateOffer)
    def update_offer(self, command):
        repo = current_domain.repository_for(Offer)
        offer = repo.get(command.offer_id)
        offer.update_details(
            title=command.title,
            description=command.description,
            value=command.value,
            min_order_amount=command.min_order_amount,
            max_discount=command.max_discount,
            image=command.image,
            banner_image=command.banner_image,
            start_date=command.start_date,
            end_date=command.end_date,
            is_active=command.is_active,
            is_banner=command.is_banner,
            sort_order=command.sort_order,
        )
        repo.add(offer)

    @handle(DeleteOffer)
    def delete_offer(self, command):
        repo = current_domain.repository_for(Offer)
        offer = repo.get(command.offer_id)
        offer.deactivate()
        repo.add(offer)
