from datetime import datetime

from protean.utils.globals import current_domain

from grocery.offers.offer import Offer


def active_offers(now=None, banners_only=False):
    """Offers running right now, in display order."""
    now = now or datetime.now()
    query = current_domain.repository_for(Offer)._dao.query.filter(
        is_active=True, start_date__lte=now, end_date__gte=now
    )
    if banners_only:
        query = query.filter(is_banner=True)
    return query.order_by("sort_order").all().items


def list_offers():
    return current_domain.repository_for(Offer)._dao.query.order_by("-created_at").all().items
