# accounting/serializers.py

from rest_framework import serializers

from accounting.models import AccountReceivable


class AccountReceivableSerializer(serializers.ModelSerializer):
    invoice_id = serializers.UUIDField(read_only=True, allow_null=True)
    customer_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = AccountReceivable
        fields = [
            "id",
            "invoice_id",
            "customer_id",
            "amount",
            "balance",
            "due_date",
            "status",
        ]
        read_only_fields = fields
