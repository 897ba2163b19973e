"""
PATH: pos/serializers/cart_item.py

CART ITEM SERIALIZER

Purpose:
- Serialize cart line items for POS UI.
- Every money field is read-only: prices are snapshotted and taxes/totals
  are recomputed server-side after each mutation.
"""

from rest_framework import serializers

from pos.models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    sku = serializers.CharField(source="product.sku", read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "sku",
            "quantity",
            "unit_price",
            "discount_amount",
            "tax_rate",
            "tax_amount",
            "total",
            "created_at",
        ]
        read_only_fields = fields
