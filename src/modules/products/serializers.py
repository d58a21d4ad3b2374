"""Product DRF serializers (read-only catalog representation)."""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "description",
            "price_cents",
            "currency",
            "stock",
            "active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
