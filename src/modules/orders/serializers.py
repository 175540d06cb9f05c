"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).  Checkout
input is validated by ``CreateOrderDTO.parse``; these serializers only
render orders and read the status-update body.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.catalog.serializers import ProductSummarySerializer
from modules.orders.models import Order, OrderLine

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class UpdateOrderStatusSerializer(serializers.Serializer):
    """``status`` is checked against the lifecycle by the service."""

    status = serializers.CharField(max_length=20)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderLineSerializer(serializers.ModelSerializer):
    """Read serializer for order lines.

    ``product_name``, ``product_sku`` and ``unit_price`` are the values
    captured at checkout; ``product`` is the live catalog entry.
    """

    product = ProductSummarySerializer(read_only=True)

    class Meta:
        model = OrderLine
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_sku",
            "quantity",
            "unit_price",
            "line_total",
            "product",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested lines."""

    lines = OrderLineSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_name",
            "customer_email",
            "status",
            "total_amount",
            "shipping_address",
            "billing_address",
            "payment_method",
            "notes",
            "created_at",
            "updated_at",
            "lines",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for the order list (no nested lines)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "customer_name",
            "customer_email",
            "status",
            "total_amount",
            "created_at",
        ]
        read_only_fields = fields
