# organizations/admin.py

from django.contrib import admin

from .models import Branch, Organization


class BranchInline(admin.TabularInline):
    model = Branch
    extra = 0
    fields = ("name", "code", "phone", "is_active")


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "base_currency", "tax_included_default", "is_active")
    list_filter = ("is_active", "tax_included_default")
    search_fields = ("name",)
    inlines = [BranchInline]


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "organization", "is_active", "created_at")
    list_filter = ("is_active", "organization")
    search_fields = ("name", "code")
