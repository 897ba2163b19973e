# taxes/serializers.py

from rest_framework import serializers

from taxes.models import OrganizationTax


class OrganizationTaxSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrganizationTax
        fields = ["id", "name", "rate", "is_default", "is_active"]
        read_only_fields = fields
