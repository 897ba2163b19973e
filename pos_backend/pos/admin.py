from django.contrib import admin

from .models import Cart, CartItem

# =====================================================
# CART ITEM INLINE (READ-ONLY)
# =====================================================


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "quantity",
        "unit_price",
        "discount_amount",
        "tax_rate",
        "tax_amount",
        "total",
        "created_at",
    )

    def has_add_permission(self, request, obj=None):
        return False


# =====================================================
# CART ADMIN
# =====================================================


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    """
    Carts change only through the POS services; admin is for inspection.
    """

    list_display = (
        "id",
        "organization",
        "branch",
        "user",
        "customer",
        "status",
        "total",
        "created_at",
    )

    readonly_fields = (
        "id",
        "organization",
        "branch",
        "user",
        "customer",
        "status",
        "tax_included",
        "applied_tax_ids",
        "subtotal",
        "tax_total",
        "discount_total",
        "total",
        "hold_reason",
        "notes",
        "created_at",
        "updated_at",
    )

    search_fields = ("user__email", "customer__full_name", "notes")
    list_filter = ("status", "organization", "created_at")

    inlines = [CartItemInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


# =====================================================
# CART ITEM ADMIN (FULLY IMMUTABLE)
# =====================================================


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "cart",
        "product",
        "quantity",
        "unit_price",
        "total",
        "created_at",
    )

    readonly_fields = (
        "id",
        "cart",
        "product",
        "quantity",
        "unit_price",
        "discount_amount",
        "tax_rate",
        "tax_amount",
        "total",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
