"""Delivery DRF serializers."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.delivery.models import DeliverySettings


class DestinationSerializer(serializers.Serializer):
    pincode = serializers.CharField(max_length=6, min_length=6)
    city = serializers.CharField(max_length=100, required=False, default="", allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, default="", allow_blank=True)
    latitude = serializers.FloatField(
        required=False, allow_null=True, default=None, min_value=-90, max_value=90
    )
    longitude = serializers.FloatField(
        required=False, allow_null=True, default=None, min_value=-180, max_value=180
    )


class DeliveryQuoteRequestSerializer(DestinationSerializer):
    subtotal = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )


class DeliverySettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeliverySettings
        fields = [
            "business_pincode",
            "business_city",
            "business_state",
            "business_latitude",
            "business_longitude",
            "local_delivery_charge",
            "city_delivery_charge",
            "state_delivery_charge",
            "national_delivery_charge",
            "free_shipping_threshold",
            "free_shipping_enabled",
            "updated_by",
            "updated_at",
        ]
        read_only_fields = ["updated_by", "updated_at"]
