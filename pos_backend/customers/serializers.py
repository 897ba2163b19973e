# customers/serializers.py

from rest_framework import serializers

from customers.models import Customer


class CustomerSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ["id", "full_name", "email", "phone", "document_number"]
        read_only_fields = fields
