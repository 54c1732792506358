"""Checkout DRF serializers."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.orders.constants import PaymentMethod


class CheckoutLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    variant_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    quantity = serializers.IntegerField(min_value=1, max_value=100, default=1)


class StartSessionSerializer(serializers.Serializer):
    items = CheckoutLineSerializer(many=True, allow_empty=False)
    source = serializers.ChoiceField(choices=["cart", "buy_now"], default="buy_now")


class ShippingAddressSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=15, min_length=10)
    street = serializers.CharField()
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    pincode = serializers.RegexField(r"^\d{6}$")
    country = serializers.CharField(max_length=100, default="India")
    latitude = serializers.FloatField(
        required=False, allow_null=True, default=None, min_value=-90, max_value=90
    )
    longitude = serializers.FloatField(
        required=False, allow_null=True, default=None, min_value=-180, max_value=180
    )


class QuoteSerializer(serializers.Serializer):
    items = CheckoutLineSerializer(many=True, allow_empty=False)
    shipping_address = ShippingAddressSerializer()
    coupon_code = serializers.CharField(
        max_length=40, required=False, allow_blank=True, allow_null=True
    )


class PaymentSerializer(serializers.Serializer):
    method = serializers.ChoiceField(
        choices=PaymentMethod.choices, default=PaymentMethod.ONLINE
    )
    status = serializers.ChoiceField(choices=["succeeded", "failed"], default="succeeded")
    payment_id = serializers.CharField(
        max_length=255, required=False, default="", allow_blank=True
    )
    gateway_order_id = serializers.CharField(
        max_length=255, required=False, default="", allow_blank=True
    )
    signature = serializers.CharField(
        max_length=255, required=False, default="", allow_blank=True
    )


class PlaceOrderSerializer(serializers.Serializer):
    session_id = serializers.CharField(max_length=64)
    shipping_address = ShippingAddressSerializer()
    payment = PaymentSerializer()
    coupon_code = serializers.CharField(
        max_length=40, required=False, allow_blank=True, allow_null=True
    )
    quoted_total = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.00"),
        required=False,
        allow_null=True,
    )
