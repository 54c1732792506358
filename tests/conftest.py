from __future__ import annotations

import hashlib
import hmac
from datetime import timedelta
from decimal import Decimal

import pytest
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from modules.checkout.dtos import CheckoutLine
from modules.checkout.services import CatalogPricer, default_checkout_pricing
from modules.checkout.sessions import build_session
from modules.coupons.constants import DiscountType
from modules.coupons.models import Coupon
from modules.delivery.models import DeliverySettings
from modules.orders.dtos import PaymentConfirmationDTO, ShippingAddressDTO
from modules.orders.services import default_order_service
from modules.products.models import Product, ProductStatus, ProductVariant
from modules.products.repositories.django_repository import ProductDjangoRepository


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Delivery settings and checkout sessions live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def admin_user():
    return get_user_model().objects.create_user(
        username="admin", password="admin-pass", is_staff=True
    )


@pytest.fixture()
def customer_user():
    return get_user_model().objects.create_user(
        username="priya", password="customer-pass"
    )


@pytest.fixture()
def admin_client(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture()
def customer_client(api_client, customer_user):
    api_client.force_authenticate(user=customer_user)
    return api_client


# ---------------------------------------------------------------------------
# Catalog, coupons, delivery
# ---------------------------------------------------------------------------


@pytest.fixture()
def ring():
    """Ring at 1000.00 with no product-level discount."""
    return Product.objects.create(
        sku="RING-001",
        name="Gold Band",
        base_price=Decimal("1000.00"),
        status=ProductStatus.ACTIVE,
    )


@pytest.fixture()
def ring_variant(ring):
    return ProductVariant.objects.create(
        product=ring, name="22K", price_adjustment=Decimal("250.00")
    )


@pytest.fixture()
def earrings():
    """Earrings listed at 800.00, on sale for 600.00."""
    return Product.objects.create(
        sku="EAR-001",
        name="Jhumka Earrings",
        base_price=Decimal("800.00"),
        discount_price=Decimal("600.00"),
        status=ProductStatus.ACTIVE,
    )


@pytest.fixture()
def delivery_settings():
    return DeliverySettings.objects.create(
        business_pincode="400001",
        business_city="Mumbai",
        business_state="Maharashtra",
        business_latitude=18.9388,
        business_longitude=72.8354,
        local_delivery_charge=Decimal("50.00"),
        city_delivery_charge=Decimal("100.00"),
        state_delivery_charge=Decimal("150.00"),
        national_delivery_charge=Decimal("250.00"),
        free_shipping_threshold=Decimal("5000.00"),
        free_shipping_enabled=True,
    )


@pytest.fixture()
def make_coupon():
    def _make(code="SAVE20", **overrides) -> Coupon:
        now = timezone.now()
        defaults = {
            "code": code,
            "discount_type": DiscountType.PERCENTAGE,
            "discount_value": Decimal("20"),
            "min_order_value": Decimal("0"),
            "valid_from": now - timedelta(days=1),
            "valid_until": now + timedelta(days=30),
        }
        defaults.update(overrides)
        return Coupon.objects.create(**defaults)

    return _make


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def national_address():
    """Bengaluru address: national zone from a Mumbai origin."""
    return ShippingAddressDTO(
        name="Priya Sharma",
        phone="9876543210",
        street="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        pincode="560001",
    )


@pytest.fixture()
def order_service():
    return default_order_service()


@pytest.fixture()
def make_session(ring):
    pricer = CatalogPricer(ProductDjangoRepository())

    def _make(*lines: CheckoutLine, owner_id: str = "user-1"):
        lines = lines or (CheckoutLine(product_id=str(ring.id), quantity=1),)
        return build_session(pricer.price_lines(lines), owner_id=owner_id)

    return _make


@pytest.fixture()
def payment_signature():
    """Signs a checkout result the way the gateway does."""

    def _sign(gateway_order_id: str, payment_id: str) -> str:
        message = f"{gateway_order_id}|{payment_id}".encode("utf-8")
        return hmac.new(
            settings.RAZORPAY_KEY_SECRET.encode("utf-8"), message, hashlib.sha256
        ).hexdigest()

    return _sign


@pytest.fixture()
def signed_payment(payment_signature):
    def _make(payment_id: str = "pay_123", **overrides) -> PaymentConfirmationDTO:
        gateway_order_id = overrides.pop("gateway_order_id", f"order_{payment_id}")
        data = {
            "payment_id": payment_id,
            "gateway_order_id": gateway_order_id,
            "signature": payment_signature(gateway_order_id, payment_id),
        }
        data.update(overrides)
        return PaymentConfirmationDTO(**data)

    return _make


@pytest.fixture()
def place_order(
    order_service, make_session, national_address, delivery_settings, signed_payment
):
    """Create an order through the service; online paid unless overridden."""

    def _place(payment=None, coupon_code=None, user_id="user-1", session=None):
        return order_service.create_from_session(
            session or make_session(owner_id=user_id),
            national_address,
            payment or signed_payment(),
            coupon_code=coupon_code,
            user_id=user_id,
        )

    return _place


@pytest.fixture()
def checkout_pricing():
    return default_checkout_pricing()
