"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single item in an order creation request."""

    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.IntegerField(min_value=0)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    items = CreateOrderItemSerializer(many=True, allow_empty=False)
    pickup_point = serializers.CharField(max_length=255)
    delivery_date = serializers.DateTimeField(required=False, allow_null=True)


class UpdateOrderStatusSerializer(serializers.Serializer):
    """Status membership is checked by the service."""

    status = serializers.CharField()


class ExportQuerySerializer(serializers.Serializer):
    """Validates export query parameters."""

    user_id = serializers.IntegerField(required=False, min_value=1)
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    min_amount = serializers.IntegerField(required=False, min_value=0)
    max_amount = serializers.IntegerField(required=False, min_value=0)
    limit = serializers.IntegerField(required=False, min_value=1)
    offset = serializers.IntegerField(required=False, min_value=0)

    def validate(self, attrs):
        min_amount = attrs.get("min_amount")
        max_amount = attrs.get("max_amount")
        if (
            min_amount is not None
            and max_amount is not None
            and min_amount > max_amount
        ):
            raise serializers.ValidationError(
                "min_amount cannot be greater than max_amount."
            )
        return attrs


class StatsQuerySerializer(serializers.Serializer):
    """``?from=YYYY-MM-DD&to=YYYY-MM-DD``; both optional."""

    def get_fields(self):
        # ``from`` is a keyword, so the fields cannot be class attributes.
        return {
            "from": serializers.DateField(required=False),
            "to": serializers.DateField(required=False),
        }


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "quantity",
            "price",
            "total_price",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items."""

    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "status",
            "delivery_date",
            "pickup_point",
            "order_date",
            "total_amount",
            "receipt_url",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for exports (no nested relations)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "status",
            "delivery_date",
            "pickup_point",
            "order_date",
            "total_amount",
            "receipt_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderStatsSerializer(serializers.Serializer):
    status = serializers.CharField()
    count = serializers.IntegerField()
