"""
PATH: pos/serializers/inputs.py

Request bodies of the POS endpoints (shape only; business rules live in
the services).
"""

from rest_framework import serializers

from pos.models import Cart
from pos.services.cart_store import MUTATIONS
from sales.models import Payment


class CartListQuerySerializer(serializers.Serializer):
    status = serializers.MultipleChoiceField(choices=Cart.STATUS_CHOICES, required=False)


class MutateCartInputSerializer(serializers.Serializer):
    """
    {"op": {"type": "add_item", "product_id": "...", "quantity": 2}}
    """

    op = serializers.DictField()

    def validate_op(self, value):
        op_type = value.get("type")
        if op_type not in MUTATIONS:
            raise serializers.ValidationError(
                f"type must be one of: {', '.join(sorted(MUTATIONS))}"
            )
        return value


class HoldCartInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class PaymentEntryInputSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=Payment.METHOD_CHOICES)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    reference = serializers.CharField(required=False, allow_blank=True, default="", max_length=128)


class CheckoutInputSerializer(serializers.Serializer):
    payments = PaymentEntryInputSerializer(many=True)
    allow_partial = serializers.BooleanField(required=False, default=False)


class HoldWithDebtInputSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)
    payment_terms = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CancelDebtInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
