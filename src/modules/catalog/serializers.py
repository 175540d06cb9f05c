"""Catalog DRF serializers (read-only public surface)."""

from __future__ import annotations

from rest_framework import serializers

from modules.catalog.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Public product representation, including current availability."""

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "price",
            "stock_quantity",
            "image_url",
            "category",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProductSummarySerializer(serializers.ModelSerializer):
    """Compact product block embedded in order lines."""

    class Meta:
        model = Product
        fields = ["id", "sku", "name", "description", "price"]
        read_only_fields = fields
