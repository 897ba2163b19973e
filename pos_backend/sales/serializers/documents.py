# sales/serializers/documents.py

"""
Read-only serializers for the financial records the POS pipelines write.
"""

from rest_framework import serializers

from sales.models import InvoiceItem, Payment, Sale, SalesInvoice


class SaleSerializer(serializers.ModelSerializer):
    customer_id = serializers.UUIDField(read_only=True, allow_null=True)
    source_cart_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "customer_id",
            "source_cart_id",
            "sale_date",
            "subtotal",
            "tax_total",
            "discount_total",
            "total",
            "balance",
            "status",
            "payment_status",
            "notes",
        ]
        read_only_fields = fields


class InvoiceItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = InvoiceItem
        fields = [
            "id",
            "product_id",
            "description",
            "qty",
            "unit_price",
            "tax_rate",
            "tax_amount",
            "discount_amount",
            "total_line",
            "tax_included",
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    source = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            "id",
            "method",
            "amount",
            "currency",
            "reference",
            "status",
            "source",
            "created_at",
        ]
        read_only_fields = fields

    def get_source(self, obj) -> dict:
        src = obj.source
        return {"kind": src.kind, "id": str(src.id)}


class SalesInvoiceSerializer(serializers.ModelSerializer):
    sale_id = serializers.UUIDField(read_only=True, allow_null=True)
    customer_id = serializers.UUIDField(read_only=True, allow_null=True)
    related_invoice_id = serializers.UUIDField(read_only=True, allow_null=True)
    items = InvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = SalesInvoice
        fields = [
            "id",
            "number",
            "document_type",
            "related_invoice_id",
            "sale_id",
            "customer_id",
            "issue_date",
            "due_date",
            "currency",
            "payment_method",
            "payment_terms",
            "tax_included",
            "subtotal",
            "tax_total",
            "discount_total",
            "total",
            "balance",
            "status",
            "description",
            "notes",
            "items",
        ]
        read_only_fields = fields
