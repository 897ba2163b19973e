# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Products are organization-scoped master data.
- Tax overrides are edited inline: when a product has at least one override,
  those taxes replace the organization defaults on every cart line.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product
from taxes.models import ProductTaxOverride


class ProductTaxOverrideInline(admin.TabularInline):
    model = ProductTaxOverride
    extra = 0
    autocomplete_fields = ("tax",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "organization", "unit_price", "is_active")
    list_filter = ("organization", "is_active")
    search_fields = ("name", "sku")
    inlines = [ProductTaxOverrideInline]
