"""Unit tests for coupon administration (``CouponService`` and model rules)."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone
from pydantic import ValidationError as PydanticValidationError

from modules.coupons.constants import DiscountType
from modules.coupons.dtos import CreateCouponDTO, UpdateCouponDTO
from modules.coupons.exceptions import (
    CouponAlreadyExists,
    CouponNotFound,
    InvalidCouponDefinition,
)
from modules.coupons.models import Coupon
from modules.coupons.repositories.django_repository import CouponDjangoRepository
from modules.coupons.services import CouponService

pytestmark = pytest.mark.unit


@pytest.fixture()
def service():
    return CouponService(CouponDjangoRepository())


def _dto(**overrides) -> CreateCouponDTO:
    now = timezone.now()
    data = {
        "code": "diwali25",
        "discount_type": DiscountType.PERCENTAGE,
        "discount_value": Decimal("25"),
        "valid_from": now,
        "valid_until": now + timedelta(days=10),
    }
    data.update(overrides)
    return CreateCouponDTO(**data)


class TestCreateCoupon:
    def test_code_stored_uppercase(self, service):
        coupon = service.create_coupon(_dto(), created_by="42")
        assert coupon.code == "DIWALI25"
        assert coupon.usage_count == 0
        assert coupon.created_by == "42"

    def test_duplicate_code_rejected_case_insensitively(self, service):
        service.create_coupon(_dto())
        with pytest.raises(CouponAlreadyExists):
            service.create_coupon(_dto(code="Diwali25"))

    def test_percentage_over_100_rejected(self):
        with pytest.raises(PydanticValidationError):
            _dto(discount_value=Decimal("120"))

    def test_window_must_be_ordered(self):
        now = timezone.now()
        with pytest.raises(PydanticValidationError):
            _dto(valid_from=now, valid_until=now - timedelta(days=1))

    def test_zero_discount_rejected(self):
        with pytest.raises(PydanticValidationError):
            _dto(discount_value=Decimal("0"))


class TestDeactivateCoupon:
    def test_deactivate(self, service, make_coupon):
        make_coupon("SAVE20")
        coupon = service.deactivate_coupon("save20")
        assert coupon.is_active is False
        assert Coupon.objects.get(code="SAVE20").is_active is False

    def test_unknown(self, service):
        with pytest.raises(CouponNotFound):
            service.deactivate_coupon("GHOST")



class TestUpdateCoupon:
    def test_partial_edit_keeps_other_fields(self, service, make_coupon):
        make_coupon("SAVE20", min_order_value=Decimal("500"))
        coupon = service.update_coupon(
            "save20", UpdateCouponDTO(discount_value=Decimal("30"), description="Bigger")
        )

        stored = Coupon.objects.get(code="SAVE20")
        assert coupon.discount_value == Decimal("30")
        assert stored.discount_value == Decimal("30")
        assert stored.description == "Bigger"
        assert stored.min_order_value == Decimal("500")

    def test_usage_count_is_not_touched(self, service, make_coupon):
        coupon = make_coupon("SAVE20", usage_limit=10, usage_count=4)
        # A redemption lands after the admin loaded the coupon.
        Coupon.objects.filter(pk=coupon.pk).update(usage_count=5)

        service.update_coupon("SAVE20", UpdateCouponDTO(usage_limit=20))

        stored = Coupon.objects.get(pk=coupon.pk)
        assert stored.usage_limit == 20
        assert stored.usage_count == 5

    def test_percentage_over_100_rejected(self, service, make_coupon):
        make_coupon("SAVE20")
        with pytest.raises(InvalidCouponDefinition) as exc_info:
            service.update_coupon("SAVE20", UpdateCouponDTO(discount_value=Decimal("150")))
        assert "discount_value" in exc_info.value.errors
        assert Coupon.objects.get(code="SAVE20").discount_value == Decimal("20")

    def test_switch_to_percentage_checks_existing_value(self, service, make_coupon):
        make_coupon("FLAT500", discount_type=DiscountType.FIXED, discount_value=Decimal("500"))
        with pytest.raises(InvalidCouponDefinition):
            service.update_coupon(
                "FLAT500", UpdateCouponDTO(discount_type=DiscountType.PERCENTAGE)
            )

    def test_window_checked_against_stored_start(self, service, make_coupon):
        coupon = make_coupon("SAVE20")
        with pytest.raises(InvalidCouponDefinition) as exc_info:
            service.update_coupon(
                "SAVE20",
                UpdateCouponDTO(valid_until=coupon.valid_from - timedelta(hours=1)),
            )
        assert "valid_until" in exc_info.value.errors

    def test_limit_below_usage_rejected(self, service, make_coupon):
        make_coupon("SAVE20", usage_limit=10, usage_count=6)
        with pytest.raises(InvalidCouponDefinition) as exc_info:
            service.update_coupon("SAVE20", UpdateCouponDTO(usage_limit=5))
        assert "usage_limit" in exc_info.value.errors

    def test_unknown(self, service):
        with pytest.raises(CouponNotFound):
            service.update_coupon("GHOST", UpdateCouponDTO(is_active=False))

class TestCouponModel:
    def test_clean_rejects_inverted_window(self):
        now = timezone.now()
        coupon = Coupon(
            code="BAD",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal("100"),
            valid_from=now,
            valid_until=now - timedelta(hours=1),
        )
        with pytest.raises(ValidationError):
            coupon.full_clean(exclude=["id"], validate_unique=False)

    def test_is_exhausted(self, make_coupon):
        assert make_coupon("A", usage_limit=1, usage_count=1).is_exhausted
        assert not make_coupon("B", usage_limit=None, usage_count=99).is_exhausted
