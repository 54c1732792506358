"""Coupon DRF serializers for API input/output."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.coupons.constants import DiscountType
from modules.coupons.models import Coupon


class ValidateCouponSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=40, trim_whitespace=True)
    subtotal = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )


class EligibleCouponsQuerySerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )


class CreateCouponSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=40)
    description = serializers.CharField(
        max_length=255, required=False, default="", allow_blank=True
    )
    discount_type = serializers.ChoiceField(choices=DiscountType.choices)
    discount_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    min_order_value = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, default=Decimal("0.00")
    )
    max_discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, default=None
    )
    valid_from = serializers.DateTimeField()
    valid_until = serializers.DateTimeField()
    usage_limit = serializers.IntegerField(
        required=False, allow_null=True, default=None, min_value=1
    )
    is_active = serializers.BooleanField(required=False, default=True)


class CouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "description",
            "discount_type",
            "discount_value",
            "min_order_value",
            "max_discount",
            "valid_from",
            "valid_until",
            "usage_limit",
            "usage_count",
            "is_active",
            "created_at",
        ]
        read_only_fields = fields


class UpdateCouponSerializer(serializers.Serializer):
    """PATCH body; the code and usage count cannot be edited."""

    description = serializers.CharField(
        max_length=255, required=False, allow_blank=True
    )
    discount_type = serializers.ChoiceField(choices=DiscountType.choices, required=False)
    discount_value = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False
    )
    min_order_value = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False
    )
    max_discount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    valid_from = serializers.DateTimeField(required=False)
    valid_until = serializers.DateTimeField(required=False)
    usage_limit = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    is_active = serializers.BooleanField(required=False)
