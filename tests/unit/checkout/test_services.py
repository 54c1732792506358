"""Unit tests for checkout pricing and catalog pricing."""

from __future__ import annotations

from decimal import Decimal

import pytest
from freezegun import freeze_time

from modules.checkout.dtos import CheckoutLine
from modules.checkout.exceptions import EmptyCheckout
from modules.checkout.services import CatalogPricer, default_checkout_service
from modules.coupons.exceptions import CouponBelowMinimum, CouponNotFound
from modules.delivery.constants import DeliveryZone
from modules.delivery.dtos import Location
from modules.delivery.exceptions import InvalidPincode
from modules.products.exceptions import InactiveProduct, ProductNotFound, VariantNotFound
from modules.products.models import ProductStatus, ProductVariant
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit

BENGALURU = Location(pincode="560001", city="Bengaluru", state="Karnataka")
PUNE = Location(pincode="411001", city="Pune", state="Maharashtra")


@pytest.fixture()
def pricer():
    return CatalogPricer(ProductDjangoRepository())


class TestCatalogPricer:
    def test_base_price(self, pricer, ring):
        item = pricer.price_line(CheckoutLine(product_id=str(ring.id), quantity=2))
        assert item.unit_price == Decimal("1000.00")
        assert item.line_total == Decimal("2000.00")
        assert item.product_name == "Gold Band"

    def test_sale_price_wins(self, pricer, earrings):
        item = pricer.price_line(CheckoutLine(product_id=str(earrings.id)))
        assert item.unit_price == Decimal("600.00")

    def test_variant_adjustment(self, pricer, ring, ring_variant):
        item = pricer.price_line(
            CheckoutLine(product_id=str(ring.id), variant_id=str(ring_variant.id))
        )
        assert item.unit_price == Decimal("1250.00")
        assert item.variant_name == "22K"

    def test_unknown_product(self, pricer):
        with pytest.raises(ProductNotFound):
            pricer.price_line(CheckoutLine(product_id="not-a-uuid"))

    def test_inactive_product(self, pricer, ring):
        ring.status = ProductStatus.INACTIVE
        ring.save()
        with pytest.raises(InactiveProduct):
            pricer.price_line(CheckoutLine(product_id=str(ring.id)))

    def test_variant_of_other_product(self, pricer, ring_variant, earrings):
        with pytest.raises(VariantNotFound):
            pricer.price_line(
                CheckoutLine(product_id=str(earrings.id), variant_id=str(ring_variant.id))
            )

    def test_inactive_variant(self, pricer, ring, ring_variant):
        ProductVariant.objects.filter(id=ring_variant.id).update(is_active=False)
        with pytest.raises(VariantNotFound):
            pricer.price_line(
                CheckoutLine(product_id=str(ring.id), variant_id=str(ring_variant.id))
            )


class TestCheckoutPricing:
    def test_breakdown_without_coupon(self, checkout_pricing, delivery_settings):
        quote = checkout_pricing.quote(Decimal("1000"), BENGALURU)

        assert quote.delivery.zone == DeliveryZone.NATIONAL
        assert quote.breakdown.delivery_charge == Decimal("250.00")
        assert quote.breakdown.tax == Decimal("125.00")
        assert quote.breakdown.total == Decimal("1375.00")
        assert quote.coupon is None

    def test_breakdown_with_coupon(self, checkout_pricing, delivery_settings, make_coupon):
        make_coupon("SAVE20")
        quote = checkout_pricing.quote(Decimal("1000"), PUNE, "SAVE20")

        assert quote.coupon.code == "SAVE20"
        assert quote.breakdown.discount == Decimal("200.00")
        # (1000 - 200 + 150) * 1.10
        assert quote.breakdown.total == Decimal("1045.00")

    @freeze_time("2026-01-10 06:00:00")
    def test_as_dict(self, checkout_pricing, delivery_settings):
        data = checkout_pricing.quote(Decimal("1000"), PUNE).as_dict()
        assert data["delivery_zone"] == "state"
        assert data["is_free_shipping"] is False
        assert data["coupon"] is None
        assert data["total"] == Decimal("1265.00")
        assert data["estimated_delivery_date"] == "2026-01-13"

    def test_unknown_coupon(self, checkout_pricing, delivery_settings):
        with pytest.raises(CouponNotFound):
            checkout_pricing.quote(Decimal("1000"), PUNE, "NOPE")

    def test_coupon_below_minimum(self, checkout_pricing, delivery_settings, make_coupon):
        make_coupon("BIG", min_order_value=Decimal("2000"))
        with pytest.raises(CouponBelowMinimum) as exc_info:
            checkout_pricing.quote(Decimal("1500"), PUNE, "BIG")
        assert exc_info.value.shortfall == Decimal("500.00")

    def test_bad_destination_pincode(self, checkout_pricing, delivery_settings):
        with pytest.raises(InvalidPincode):
            checkout_pricing.quote(Decimal("1000"), Location(pincode="999"))


class TestCheckoutService:
    def test_start_session_is_stored(self, ring):
        service = default_checkout_service()
        session = service.start_session(
            [CheckoutLine(product_id=str(ring.id), quantity=2)], owner_id="u1"
        )
        assert session.subtotal == Decimal("2000.00")
        assert session.owner_id == "u1"

    def test_quote_lines(self, ring, earrings, delivery_settings):
        quote = default_checkout_service().quote(
            [
                CheckoutLine(product_id=str(ring.id)),
                CheckoutLine(product_id=str(earrings.id), quantity=2),
            ],
            PUNE,
        )
        assert quote.breakdown.subtotal == Decimal("2200.00")

    def test_quote_without_lines(self, delivery_settings):
        with pytest.raises(EmptyCheckout):
            default_checkout_service().quote([], PUNE)
