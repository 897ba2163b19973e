from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("full_name", "organization", "document_number", "phone", "is_active")
    list_filter = ("organization", "is_active")
    search_fields = ("full_name", "document_number", "email", "phone")
    ordering = ("full_name",)
