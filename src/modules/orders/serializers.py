"""Order DRF serializers for API input/output.

Business logic lives in the Service Layer, which receives Pydantic DTOs
from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.state_machine import OrderStateMachine

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class StatusUpdateSerializer(serializers.Serializer):
    new_status = serializers.CharField(max_length=20)
    expected_version = serializers.IntegerField(min_value=1)
    tracking_number = serializers.CharField(
        max_length=100, required=False, allow_blank=True, allow_null=True
    )
    tracking_url = serializers.URLField(
        max_length=500, required=False, allow_blank=True, allow_null=True
    )
    courier_name = serializers.CharField(
        max_length=100, required=False, allow_blank=True, allow_null=True
    )
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000)
    expected_version = serializers.IntegerField(min_value=1)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Line item with its price and name snapshot."""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "variant_id",
            "product_name",
            "variant_name",
            "quantity",
            "unit_price",
            "subtotal",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "notes",
            "updated_by",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and history."""

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)
    allowed_transitions = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user_id",
            "status",
            "payment_status",
            "payment_method",
            "payment_id",
            "subtotal",
            "discount",
            "delivery_charge",
            "tax",
            "total",
            "coupon_code",
            "shipping_address",
            "delivery_pincode",
            "delivery_zone",
            "version",
            "tracking_number",
            "tracking_url",
            "courier_name",
            "cancellation_reason",
            "cancelled_at",
            "created_at",
            "updated_at",
            "items",
            "status_history",
            "allowed_transitions",
        ]
        read_only_fields = fields

    def get_allowed_transitions(self, obj: Order) -> list[str]:
        return sorted(OrderStateMachine().allowed_transitions(obj.status))


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user_id",
            "status",
            "payment_status",
            "total",
            "version",
            "created_at",
        ]
        read_only_fields = fields
