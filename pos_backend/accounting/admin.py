# accounting/admin.py

from django.contrib import admin

from accounting.models import AccountReceivable

# ============================================================
# ACCOUNTS RECEIVABLE (READ-ONLY)
# ============================================================


@admin.register(AccountReceivable)
class AccountReceivableAdmin(admin.ModelAdmin):
    list_display = (
        "invoice",
        "customer",
        "organization",
        "amount",
        "balance",
        "due_date",
        "status",
    )
    list_filter = ("organization", "status")
    search_fields = ("invoice__number", "customer__full_name")
    readonly_fields = (
        "id",
        "organization",
        "branch",
        "customer",
        "invoice",
        "sale",
        "amount",
        "balance",
        "due_date",
        "status",
        "created_at",
        "updated_at",
    )
    ordering = ("due_date",)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
