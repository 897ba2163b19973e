"""
PATH: pos/urls.py

POS URLS

Purpose:
- Cart lifecycle and mutations
- Checkout, hold with debt, credit note reversal
- Invoice lookup and tax selector
"""

from django.urls import path

from pos.views.api import (
    CartActivateView,
    CartCancelDebtView,
    CartCheckoutView,
    CartDetailView,
    CartHoldView,
    CartHoldWithDebtView,
    CartInvoiceView,
    CartListCreateView,
    CartMutateView,
    TaxListView,
)

app_name = "pos"

urlpatterns = [
    path("carts/", CartListCreateView.as_view(), name="carts"),
    path("carts/<uuid:cart_id>/", CartDetailView.as_view(), name="cart-detail"),
    path("carts/<uuid:cart_id>/mutate/", CartMutateView.as_view(), name="cart-mutate"),
    path("carts/<uuid:cart_id>/hold/", CartHoldView.as_view(), name="cart-hold"),
    path("carts/<uuid:cart_id>/activate/", CartActivateView.as_view(), name="cart-activate"),
    path("carts/<uuid:cart_id>/checkout/", CartCheckoutView.as_view(), name="cart-checkout"),
    path("carts/<uuid:cart_id>/hold-with-debt/", CartHoldWithDebtView.as_view(), name="cart-hold-with-debt"),
    path("carts/<uuid:cart_id>/cancel-debt/", CartCancelDebtView.as_view(), name="cart-cancel-debt"),
    path("carts/<uuid:cart_id>/invoice/", CartInvoiceView.as_view(), name="cart-invoice"),
    path("taxes/", TaxListView.as_view(), name="taxes"),
]
