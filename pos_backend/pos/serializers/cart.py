"""
PATH: pos/serializers/cart.py

CART SERIALIZER

Purpose:
- Return a POS cart in a frontend-friendly shape.
- Totals are stored by the cart store (never trusted from client).
"""

from rest_framework import serializers

from pos.models import Cart

from .cart_item import CartItemSerializer


class CartSerializer(serializers.ModelSerializer):
    organization_id = serializers.UUIDField(read_only=True)
    branch_id = serializers.UUIDField(read_only=True, allow_null=True)
    user_id = serializers.UUIDField(read_only=True)
    customer_id = serializers.UUIDField(read_only=True, allow_null=True)
    customer_name = serializers.CharField(source="customer.full_name", read_only=True, default=None)

    items = CartItemSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Cart
        fields = [
            "id",
            "organization_id",
            "branch_id",
            "user_id",
            "customer_id",
            "customer_name",
            "status",
            "tax_included",
            "applied_tax_ids",
            "items",
            "item_count",
            "subtotal",
            "tax_total",
            "discount_total",
            "total",
            "hold_reason",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_item_count(self, obj) -> int:
        # Units across lines, not number of lines
        return sum(int(i.quantity or 0) for i in obj.items.all())
