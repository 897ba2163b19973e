# sales/admin.py

from django.contrib import admin

from sales.models import DocumentSequence, InvoiceItem, Payment, Sale, SaleItem, SalesInvoice


# ======================================================
# SALE ADMIN
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "quantity", "unit_price", "discount_amount", "tax_rate", "tax_amount", "total")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "organization",
        "customer",
        "status",
        "payment_status",
        "total",
        "balance",
        "sale_date",
    )
    readonly_fields = (
        "subtotal",
        "tax_total",
        "discount_total",
        "total",
        "balance",
        "source_cart",
        "created_at",
        "updated_at",
    )
    search_fields = ("id", "customer__full_name")
    list_filter = ("organization", "status", "payment_status")
    inlines = [SaleItemInline]


# ======================================================
# INVOICE ADMIN
# ======================================================


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "description",
        "qty",
        "unit_price",
        "tax_rate",
        "tax_amount",
        "discount_amount",
        "total_line",
    )

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(SalesInvoice)
class SalesInvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "number",
        "document_type",
        "customer",
        "status",
        "total",
        "balance",
        "due_date",
    )
    readonly_fields = (
        "number",
        "document_type",
        "related_invoice",
        "subtotal",
        "tax_total",
        "discount_total",
        "total",
        "balance",
        "created_at",
        "updated_at",
    )
    search_fields = ("number", "customer__full_name")
    list_filter = ("organization", "document_type", "status")
    inlines = [InvoiceItemInline]


# ======================================================
# PAYMENTS + SEQUENCES
# ======================================================


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "method", "amount", "currency", "invoice", "sale", "status", "created_at")
    list_filter = ("organization", "method", "status")
    search_fields = ("reference", "invoice__number")
    readonly_fields = ("invoice", "sale", "method", "amount", "currency", "reference", "created_at")


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ("organization", "kind", "prefix", "last_value", "updated_at")
    list_filter = ("kind",)
    readonly_fields = ("last_value", "updated_at")
