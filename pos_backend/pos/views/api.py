# pos/views/api.py

"""
POS API VIEWS

Purpose:
- Cart lifecycle: list/create/retrieve, mutate, hold, activate
- Settlement (checkout), hold with debt, cancel debt with a credit note
- Invoice lookup for a cart held with debt
- Organization taxes for the tax selector

Hard rules:
- Every request is scoped to the user's organization and a branch
  (branch_id param or the user's default branch).
- Views are thin: all business rules live in pos/services and
  sales/services; domain errors are mapped to the error envelope
  {"error": {"code", "message", "step"}}.
"""

from __future__ import annotations

import logging

from django.http import Http404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import serializers, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.serializers import AccountReceivableSerializer
from customers.serializers import CustomerSummarySerializer
from organizations.services.scope import resolve_scope
from permissions.roles import CAP_POS_CREDIT, CAP_POS_SELL, CAP_POS_VOID, HasCapability
from pos.serializers import (
    CancelDebtInputSerializer,
    CartListQuerySerializer,
    CartSerializer,
    CheckoutInputSerializer,
    HoldCartInputSerializer,
    HoldWithDebtInputSerializer,
    MutateCartInputSerializer,
)
from pos.services.cart_store import activate_cart, create_cart, get_cart, hold_cart, list_carts, mutate_cart
from pos.services.exceptions import POSError
from sales.serializers import InvoiceItemSerializer, PaymentSerializer, SaleSerializer, SalesInvoiceSerializer
from sales.services.checkout_orchestrator import settle
from sales.services.credit_note_orchestrator import cancel_debt_with_credit_note
from sales.services.debt_orchestrator import hold_cart_with_debt
from sales.services.invoice_lookup import get_invoice_for_cart
from taxes.serializers import OrganizationTaxSerializer
from taxes.services.tax_catalog import get_organization_taxes

logger = logging.getLogger(__name__)


# =====================================================
# API ERROR NORMALIZATION
# =====================================================

def error_response(*, code: str, message: str, http_status: int, step: str | None = None):
    return Response(
        {"error": {"code": code, "message": message, "step": step}},
        status=http_status,
    )


def _validated(serializer_class, data) -> dict:
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise serializers.ValidationError(serializer.errors)
    return serializer.validated_data


class POSBaseView(APIView):
    """
    Common base: JWT auth + capability check + domain error mapping.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_POS_SELL

    def handle_exception(self, exc):
        if isinstance(exc, POSError):
            log = logger.warning if exc.http_status < 500 else logger.error
            log(
                "POS request failed",
                extra={
                    "code": exc.code,
                    "step": exc.step,
                    "view": self.__class__.__name__,
                    "error": exc.message,
                },
            )
            return error_response(
                code=exc.code,
                message=exc.message,
                http_status=exc.http_status,
                step=exc.step,
            )

        if isinstance(exc, Http404):
            return error_response(
                code="NOT_FOUND",
                message=str(exc) or "Not found.",
                http_status=status.HTTP_404_NOT_FOUND,
            )

        if isinstance(exc, serializers.ValidationError):
            return error_response(
                code="VALIDATION_ERROR",
                message=_flatten_errors(exc.detail),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        return super().handle_exception(exc)


def _flatten_errors(detail) -> str:
    if isinstance(detail, dict):
        parts = []
        for key, value in detail.items():
            parts.append(f"{key}: {_flatten_errors(value)}")
        return "; ".join(parts)
    if isinstance(detail, list):
        return ", ".join(_flatten_errors(v) for v in detail)
    return str(detail)


# =====================================================
# CARTS
# =====================================================

class CartListCreateView(POSBaseView):
    serializer_class = CartSerializer

    @extend_schema(
        parameters=[CartListQuerySerializer],
        responses={200: CartSerializer(many=True)},
        description="List carts of the current branch (default statuses: active, hold)",
    )
    def get(self, request):
        scope = resolve_scope(request=request)

        statuses = [s.strip() for s in request.query_params.getlist("status") if s.strip()]
        if len(statuses) == 1 and "," in statuses[0]:
            statuses = [s.strip() for s in statuses[0].split(",") if s.strip()]
        _validated(CartListQuerySerializer, {"status": statuses} if statuses else {})

        carts = list_carts(scope=scope, statuses=statuses or None)
        return Response(CartSerializer(carts, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        request=None,
        responses={201: CartSerializer},
        description="Create a new active cart for the current branch",
    )
    def post(self, request):
        scope = resolve_scope(request=request)
        cart = create_cart(scope=scope)
        return Response(CartSerializer(cart).data, status=status.HTTP_201_CREATED)


class CartDetailView(POSBaseView):
    serializer_class = CartSerializer

    @extend_schema(responses={200: CartSerializer}, description="Retrieve a cart")
    def get(self, request, cart_id):
        scope = resolve_scope(request=request)
        cart = get_cart(scope=scope, cart_id=cart_id)
        return Response(CartSerializer(cart).data, status=status.HTTP_200_OK)


class CartMutateView(POSBaseView):
    serializer_class = CartSerializer

    @extend_schema(
        request=MutateCartInputSerializer,
        responses={200: CartSerializer},
        description="Apply one mutation to an active cart; totals are recomputed before returning",
        examples=[
            OpenApiExample(
                "Add item",
                value={"op": {"type": "add_item", "product_id": "6f0e2a3c-9d55-4d8e-a3e6-3b1f5d0b2c11", "quantity": 2}},
                request_only=True,
            ),
            OpenApiExample(
                "Set discount",
                value={"op": {"type": "set_item_discount", "item_id": "0b7a1c2d-0000-4000-8000-000000000001", "amount": "500.00"}},
                request_only=True,
            ),
        ],
    )
    def post(self, request, cart_id):
        scope = resolve_scope(request=request)
        data = _validated(MutateCartInputSerializer, request.data)

        cart = mutate_cart(scope=scope, cart_id=cart_id, op=data["op"])
        return Response(CartSerializer(cart).data, status=status.HTTP_200_OK)


class CartHoldView(POSBaseView):
    serializer_class = CartSerializer

    @extend_schema(request=HoldCartInputSerializer, responses={200: CartSerializer}, description="Put an active cart on hold")
    def post(self, request, cart_id):
        scope = resolve_scope(request=request)
        data = _validated(HoldCartInputSerializer, request.data)

        cart = hold_cart(scope=scope, cart_id=cart_id, reason=data["reason"])
        return Response(CartSerializer(cart).data, status=status.HTTP_200_OK)


class CartActivateView(POSBaseView):
    serializer_class = CartSerializer

    @extend_schema(request=None, responses={200: CartSerializer}, description="Resume a held cart")
    def post(self, request, cart_id):
        scope = resolve_scope(request=request)
        cart = activate_cart(scope=scope, cart_id=cart_id)
        return Response(CartSerializer(cart).data, status=status.HTTP_200_OK)


# =====================================================
# SETTLEMENT
# =====================================================

class CartCheckoutView(POSBaseView):
    """
    Settle a cart into Sale + Invoice + Payments.
    """

    @extend_schema(
        request=CheckoutInputSerializer,
        responses={200: OpenApiTypes.OBJECT},
        description="Checkout a cart. Payments must cover the total unless allow_partial is true.",
        examples=[
            OpenApiExample(
                "Cash with change",
                value={"payments": [{"method": "cash", "amount": "7000.00"}]},
                request_only=True,
            ),
            OpenApiExample(
                "Split card + cash",
                value={
                    "payments": [
                        {"method": "card", "amount": "3000.00", "reference": "AUTH-8891"},
                        {"method": "cash", "amount": "2000.00"},
                    ]
                },
                request_only=True,
            ),
        ],
    )
    def post(self, request, cart_id):
        scope = resolve_scope(request=request)
        data = _validated(CheckoutInputSerializer, request.data)

        result = settle(
            scope=scope,
            cart_id=cart_id,
            payments=[dict(p) for p in data["payments"]],
            allow_partial=data["allow_partial"],
        )

        return Response(
            {
                "sale": SaleSerializer(result.sale).data,
                "invoice": SalesInvoiceSerializer(result.invoice).data if result.invoice else None,
                "payments": PaymentSerializer(result.payments, many=True).data,
                "receivable": AccountReceivableSerializer(result.receivable).data if result.receivable else None,
                "total_paid": str(result.total_paid),
                "change": str(result.change),
                "remaining": str(result.remaining),
                "degraded_steps": result.degraded_steps,
                "steps": [s.as_dict() for s in result.steps],
            },
            status=status.HTTP_200_OK,
        )


# =====================================================
# CREDIT (HOLD WITH DEBT / CREDIT NOTE)
# =====================================================

class CartHoldWithDebtView(POSBaseView):
    required_capability = CAP_POS_CREDIT

    @extend_schema(
        request=HoldWithDebtInputSerializer,
        responses={200: OpenApiTypes.OBJECT},
        description="Issue a credit invoice for the cart's customer and hold the cart with debt",
    )
    def post(self, request, cart_id):
        scope = resolve_scope(request=request)
        data = _validated(HoldWithDebtInputSerializer, request.data)

        result = hold_cart_with_debt(
            scope=scope,
            cart_id=cart_id,
            reason=data["reason"],
            payment_terms=data.get("payment_terms"),
            notes=data.get("notes", ""),
        )

        return Response(
            {
                "cart": CartSerializer(result.cart).data,
                "invoice": SalesInvoiceSerializer(result.invoice).data,
                "account_receivable": AccountReceivableSerializer(result.receivable).data,
            },
            status=status.HTTP_200_OK,
        )


class CartCancelDebtView(POSBaseView):
    required_capability = CAP_POS_VOID

    @extend_schema(
        request=CancelDebtInputSerializer,
        responses={200: OpenApiTypes.OBJECT},
        description="Reverse the debt invoice of a held-with-debt cart with a credit note",
    )
    def post(self, request, cart_id):
        scope = resolve_scope(request=request)
        data = _validated(CancelDebtInputSerializer, request.data)

        result = cancel_debt_with_credit_note(scope=scope, cart_id=cart_id, reason=data["reason"])

        return Response(
            {
                "cart": CartSerializer(result.cart).data,
                "credit_note": SalesInvoiceSerializer(result.credit_note).data,
            },
            status=status.HTTP_200_OK,
        )


class CartInvoiceView(POSBaseView):
    @extend_schema(responses={200: OpenApiTypes.OBJECT}, description="Invoice, items, customer and payments referenced by a cart")
    def get(self, request, cart_id):
        scope = resolve_scope(request=request)
        lookup = get_invoice_for_cart(scope=scope, cart_id=cart_id)

        return Response(
            {
                "invoice": SalesInvoiceSerializer(lookup.invoice).data,
                "items": InvoiceItemSerializer(lookup.items, many=True).data,
                "customer": CustomerSummarySerializer(lookup.customer).data if lookup.customer else None,
                "payments": PaymentSerializer(lookup.payments, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


# =====================================================
# TAXES
# =====================================================

class TaxListView(POSBaseView):
    serializer_class = OrganizationTaxSerializer

    @extend_schema(responses={200: OrganizationTaxSerializer(many=True)}, description="Active organization taxes")
    def get(self, request):
        scope = resolve_scope(request=request)
        taxes = get_organization_taxes(organization=scope.organization)
        return Response(OrganizationTaxSerializer(taxes, many=True).data, status=status.HTTP_200_OK)
