"""Checkout use cases.

- ``CatalogPricer`` prices requested lines against the product catalog.
- ``CheckoutPricing`` turns a subtotal, a destination and an optional
  coupon into a full breakdown.  The live checkout preview and order
  creation both go through it, so they agree to the paisa.
- ``CheckoutService`` starts sessions and serves quotes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, List, Optional

import structlog
from django.conf import settings

from modules.checkout.dtos import CheckoutItem, CheckoutLine, SessionSource
from modules.checkout.exceptions import EmptyCheckout
from modules.checkout.sessions import build_session
from modules.pricing.constants import DEFAULT_TAX_RATE, ZERO
from modules.pricing.engine import PricingBreakdown, compute_totals, items_subtotal
from modules.products.exceptions import InactiveProduct, ProductNotFound, VariantNotFound

if TYPE_CHECKING:
    from modules.checkout.dtos import CheckoutSession
    from modules.checkout.sessions import CheckoutSessionStore
    from modules.coupons.dtos import AppliedCoupon
    from modules.coupons.services import CouponValidator
    from modules.delivery.dtos import DeliveryQuote, Location
    from modules.delivery.services import DeliverySettingsService
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class CatalogPricer:
    def __init__(self, product_repository: IProductRepository) -> None:
        self._products = product_repository

    def price_line(self, line: CheckoutLine) -> CheckoutItem:
        """Price one line at the current effective unit price.

        Raises:
            ProductNotFound: the product does not exist.
            InactiveProduct: the product is not sellable.
            VariantNotFound: the variant is unknown, inactive or belongs to
                another product.
        """
        product = self._products.get_by_id(line.product_id)
        if product is None:
            raise ProductNotFound(f"Product {line.product_id} not found.")
        if not product.is_active:
            raise InactiveProduct(f"Product {line.product_id} is inactive.")

        variant = None
        if line.variant_id:
            variant = self._products.get_variant(line.product_id, line.variant_id)
            if variant is None:
                raise VariantNotFound(
                    f"Variant {line.variant_id} not found for product {line.product_id}."
                )

        return CheckoutItem(
            product_id=str(product.id),
            variant_id=str(variant.id) if variant else None,
            product_name=product.name,
            variant_name=variant.name if variant else "",
            unit_price=product.effective_price(variant),
            quantity=line.quantity,
        )

    def price_lines(self, lines: Iterable[CheckoutLine]) -> List[CheckoutItem]:
        return [self.price_line(line) for line in lines]


@dataclass(frozen=True)
class CheckoutQuote:
    breakdown: PricingBreakdown
    delivery: DeliveryQuote
    coupon: Optional[AppliedCoupon] = None

    def as_dict(self) -> dict:
        return {
            **self.breakdown.as_dict(),
            "delivery_zone": self.delivery.zone.value,
            "is_free_shipping": self.delivery.is_free_shipping,
            "estimated_delivery_date": self.delivery.estimated_delivery_date.isoformat(),
            "coupon": self.coupon.model_dump(mode="json") if self.coupon else None,
        }


class CheckoutPricing:
    def __init__(
        self,
        coupon_validator: CouponValidator,
        delivery_service: DeliverySettingsService,
        tax_rate: Optional[Decimal] = None,
    ) -> None:
        self._coupons = coupon_validator
        self._delivery = delivery_service
        self._tax_rate = (
            tax_rate
            if tax_rate is not None
            else getattr(settings, "ORDER_TAX_RATE", DEFAULT_TAX_RATE)
        )

    def quote(
        self,
        subtotal: Decimal,
        destination: Location,
        coupon_code: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CheckoutQuote:
        """Full price breakdown for *subtotal* shipped to *destination*.

        Coupon errors, ``InvalidPincode`` and
        ``DeliverySettingsNotConfigured`` propagate to the caller.
        """
        delivery = self._delivery.quote(destination, subtotal)
        applied = None
        if coupon_code:
            applied = self._coupons.validate(coupon_code, subtotal, now)

        breakdown = compute_totals(
            subtotal,
            discount=applied.discount_amount if applied else ZERO,
            delivery_charge=delivery.charge,
            tax_rate=self._tax_rate,
        )
        return CheckoutQuote(breakdown=breakdown, delivery=delivery, coupon=applied)


class CheckoutService:
    def __init__(
        self,
        pricer: CatalogPricer,
        pricing: CheckoutPricing,
        store: CheckoutSessionStore,
    ) -> None:
        self._pricer = pricer
        self._pricing = pricing
        self._store = store

    def start_session(
        self,
        lines: Iterable[CheckoutLine],
        source: SessionSource = "buy_now",
        owner_id: str = "",
    ) -> CheckoutSession:
        """Price *lines* and store them as a new read-once session."""
        items = self._pricer.price_lines(lines)
        session = self._store.save(build_session(items, source=source, owner_id=owner_id))
        logger.info(
            "checkout.session_started",
            session_id=session.session_id,
            source=source,
            subtotal=str(session.subtotal),
        )
        return session

    def quote(
        self,
        lines: Iterable[CheckoutLine],
        destination: Location,
        coupon_code: Optional[str] = None,
    ) -> CheckoutQuote:
        items = self._pricer.price_lines(lines)
        if not items:
            raise EmptyCheckout("A checkout needs at least one item.")
        subtotal = items_subtotal((i.unit_price, i.quantity) for i in items)
        return self._pricing.quote(subtotal, destination, coupon_code)


def default_checkout_pricing() -> CheckoutPricing:
    """Pricing wired to the Django coupon and delivery repositories."""
    from modules.coupons.repositories.django_repository import CouponDjangoRepository
    from modules.coupons.services import CouponValidator
    from modules.delivery.repositories.django_repository import (
        DeliverySettingsDjangoRepository,
    )
    from modules.delivery.services import DeliverySettingsService

    return CheckoutPricing(
        CouponValidator(CouponDjangoRepository()),
        DeliverySettingsService(DeliverySettingsDjangoRepository()),
    )


def default_checkout_service() -> CheckoutService:
    from modules.checkout.sessions import CheckoutSessionStore
    from modules.products.repositories.django_repository import ProductDjangoRepository

    return CheckoutService(
        CatalogPricer(ProductDjangoRepository()),
        default_checkout_pricing(),
        CheckoutSessionStore(),
    )
