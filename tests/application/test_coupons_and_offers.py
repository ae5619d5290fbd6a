"""Application tests for coupon administration, coupon preview and offers."""

from datetime import datetime, timedelta

import pytest
from grocery.coupon.management import DeactivateCoupon, UpdateCoupon
from grocery.coupon.queries import find_coupon, preview_coupon
from grocery.offers.management import CreateOffer, DeleteOffer, UpdateOffer
from grocery.offers.queries import active_offers, list_offers
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


class TestCouponAdministration:
    def test_duplicate_code_is_rejected(self, create_coupon):
        create_coupon(code="FRESH20")
        with pytest.raises(ValidationError) as exc:
            create_coupon(code="fresh20")
        assert exc.value.messages["code"] == ["Coupon code already exists"]

    def test_preview_does_not_consume(self, create_coupon, customer_id):
        create_coupon(code="FLAT50", coupon_type="flat", value=50.0, min_order_amount=300.0)

        preview = preview_coupon("flat50", 400.0, customer_id)

        assert preview == {"valid": True, "reason": "Coupon is valid", "code": "FLAT50", "discount": 50.0}
        assert find_coupon("FLAT50").usage_count == 0

    def test_preview_reports_reason(self, create_coupon):
        create_coupon(code="FLAT50", coupon_type="flat", value=50.0, min_order_amount=300.0)
        preview = preview_coupon("FLAT50", 250.0)
        assert preview["valid"] is False
        assert preview["reason"] == "Minimum order amount is ₹300"
        assert preview["discount"] == 0

    def test_unknown_code(self):
        with pytest.raises(ObjectNotFoundError):
            preview_coupon("NOPE", 100.0)

    def test_update_and_deactivate(self, create_coupon):
        coupon_id = create_coupon(code="MONSOON")
        current_domain.process(UpdateCoupon(coupon_id=coupon_id, value=15.0), asynchronous=False)
        assert find_coupon("MONSOON").value == 15.0

        current_domain.process(DeactivateCoupon(coupon_id=coupon_id), asynchronous=False)
        assert preview_coupon("MONSOON", 500.0)["reason"] == "Coupon is not active"


class TestOffers:
    def _create(self, title, start, end, **extra):
        return current_domain.process(
            CreateOffer(title=title, offer_type="percentage", value=10.0, start_date=start, end_date=end, **extra),
            asynchronous=False,
        )

    def test_only_running_offers_are_active(self):
        now = datetime.now()
        self._create("Running", now - timedelta(days=1), now + timedelta(days=1), sort_order=2)
        self._create("Banner", now - timedelta(days=1), now + timedelta(days=1), sort_order=1, is_banner=True)
        self._create("Upcoming", now + timedelta(days=1), now + timedelta(days=3))

        assert [o.title for o in active_offers()] == ["Banner", "Running"]
        assert [o.title for o in active_offers(banners_only=True)] == ["Banner"]
        assert len(list_offers()) == 3

    def test_delete_is_soft(self):
        now = datetime.now()
        offer_id = self._create("Running", now - timedelta(days=1), now + timedelta(days=1))

        current_domain.process(DeleteOffer(offer_id=offer_id), asynchronous=False)

        assert active_offers() == []
        assert [o.is_active for o in list_offers()] == [False]

    def test_update_window(self):
        now = datetime.now()
        offer_id = self._create("Later", now + timedelta(days=1), now + timedelta(days=2))
        current_domain.process(UpdateOffer(offer_id=offer_id, start_date=now - timedelta(hours=1)), asynchronous=False)
        assert [o.title for o in active_offers()] == ["Later"]
