from django.contrib import admin

from .models import OrganizationTax, ProductTaxOverride


@admin.register(OrganizationTax)
class OrganizationTaxAdmin(admin.ModelAdmin):
    list_display = ("name", "organization", "rate", "is_default", "is_active")
    list_filter = ("organization", "is_default", "is_active")
    search_fields = ("name",)


@admin.register(ProductTaxOverride)
class ProductTaxOverrideAdmin(admin.ModelAdmin):
    list_display = ("product", "tax", "created_at")
    search_fields = ("product__name", "product__sku", "tax__name")
