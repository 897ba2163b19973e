"""
======================================================
PATH: pos/services/cart_store.py
======================================================
CART STORE (APPLICATION SERVICE)

Purpose:
- Own every mutation of in-progress carts.
- Recompute line taxes and cart totals through the tax resolver after each
  mutation, inside the same transaction, so stale totals are never visible.

Storage:
- One Cart row per cart. A mutation locks only its own row
  (select_for_update), so concurrent mutations to different carts are
  independent and mutations to the same cart are serialized.

Mutations (dispatched by mutate_cart, op = {"type": <name>, ...}):
- add_item(product_id, quantity=1)
- update_item_quantity(item_id, quantity)   quantity <= 0 removes the line
- remove_item(item_id)
- clear_cart()
- set_item_discount(item_id, amount)
- set_customer(customer_id | None)
- set_tax_included(tax_included)
- set_applied_taxes(tax_ids)
"""

from __future__ import annotations

import inspect
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import QuerySet

from customers.models import Customer
from pos.models import Cart, CartItem
from products.services.catalog import ProductNotFound, get_product
from taxes.services.tax_catalog import (
    default_tax_ids,
    get_organization_taxes,
    organization_tax_rates,
    override_tax_rates,
)
from taxes.services.tax_resolver import LINE_PLACES, TaxLineInput, calculate_cart_taxes

from .cart_lifecycle import apply_transition, ensure_active
from .exceptions import CartNotFoundError, POSValidationError

logger = logging.getLogger(__name__)

DEFAULT_LIST_STATUSES = (Cart.STATUS_ACTIVE, Cart.STATUS_HOLD)


# =====================================================
# INPUT HELPERS
# =====================================================

def _to_int_qty(value, *, allow_zero: bool = False) -> int:
    if isinstance(value, bool):
        raise POSValidationError("quantity must be a whole integer unit")

    try:
        qty = int(str(value).strip())
    except (TypeError, ValueError):
        raise POSValidationError("quantity must be a whole integer unit")

    if qty <= 0 and not allow_zero:
        raise POSValidationError("quantity must be greater than zero")
    return qty


def _to_decimal(value, *, field: str) -> Decimal:
    if isinstance(value, bool):
        raise POSValidationError(f"{field} must be a number")

    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            raise POSValidationError(f"{field} must be a finite number")
        # Line amounts are stored with 6 decimal places.
        return amount.quantize(LINE_PLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise POSValidationError(f"{field} must be a number")


def _get_item(cart: Cart, item_id) -> CartItem:
    item = cart.items.filter(id=item_id).select_related("product").first()
    if item is None:
        raise POSValidationError(f"Item {item_id} is not in cart {cart.id}")
    return item


# =====================================================
# READS
# =====================================================

def get_cart(*, scope, cart_id, lock: bool = False) -> Cart:
    qs = Cart.objects.filter(organization_id=scope.organization_id)
    if lock:
        qs = qs.select_for_update()

    cart = qs.filter(id=cart_id).first()
    if cart is None:
        raise CartNotFoundError(f"Cart {cart_id} not found")
    return cart


def list_carts(*, scope, statuses=None) -> QuerySet:
    statuses = tuple(statuses or DEFAULT_LIST_STATUSES)

    qs = Cart.objects.filter(organization_id=scope.organization_id, status__in=statuses)
    if scope.branch_id:
        qs = qs.filter(branch_id=scope.branch_id)

    return qs.select_related("customer").prefetch_related("items__product")


# =====================================================
# CREATE
# =====================================================

@transaction.atomic
def create_cart(*, scope) -> Cart:
    organization = scope.organization

    cart = Cart.objects.create(
        organization=organization,
        branch=scope.branch,
        user=scope.user,
        status=Cart.STATUS_ACTIVE,
        tax_included=bool(organization.tax_included_default),
        applied_tax_ids=default_tax_ids(organization=organization),
    )

    logger.info(
        "POS cart created",
        extra={"cart_id": str(cart.id), "organization_id": str(organization.id)},
    )
    return cart


# =====================================================
# TOTALS
# =====================================================

def recalculate_cart(cart: Cart) -> Cart:
    """
    Re-run the tax resolver over every line and persist line + cart totals.
    """
    items = list(cart.items.select_related("product").order_by("created_at"))

    result = calculate_cart_taxes(
        [
            TaxLineInput(
                product_id=item.product_id,
                quantity=Decimal(item.quantity),
                unit_price=item.unit_price,
                discount_amount=item.discount_amount,
            )
            for item in items
        ],
        tax_included=cart.tax_included,
        organization_taxes=organization_tax_rates(
            organization=cart.organization,
            applied_ids=cart.applied_tax_ids,
        ),
        get_overrides=override_tax_rates,
    )

    for item, line in zip(items, result.lines):
        item.tax_amount = line.tax_amount
        item.tax_rate = line.tax_rate
        item.total = line.total
        item.save(update_fields=["tax_amount", "tax_rate", "total"])

    cart.subtotal = result.subtotal
    cart.tax_total = result.tax_total
    cart.discount_total = result.discount_total
    cart.total = result.total
    cart.save(update_fields=["subtotal", "tax_total", "discount_total", "total", "updated_at"])

    if result.degraded_product_ids:
        logger.warning(
            "Cart totals computed with degraded tax lines",
            extra={
                "cart_id": str(cart.id),
                "product_ids": [str(p) for p in result.degraded_product_ids],
            },
        )

    return cart


# =====================================================
# MUTATIONS
# =====================================================

def add_item(cart: Cart, *, product_id, quantity=1) -> None:
    qty = _to_int_qty(quantity)

    try:
        product = get_product(organization=cart.organization, product_id=product_id)
    except ProductNotFound as exc:
        raise POSValidationError(str(exc)) from exc

    item = cart.items.filter(product=product).first()
    if item is not None:
        item.quantity = int(item.quantity) + qty
        item.save(update_fields=["quantity"])
        return

    CartItem.objects.create(
        cart=cart,
        product=product,
        quantity=qty,
        unit_price=product.unit_price,
    )


def update_item_quantity(cart: Cart, *, item_id, quantity) -> None:
    qty = _to_int_qty(quantity, allow_zero=True)
    item = _get_item(cart, item_id)

    if qty <= 0:
        item.delete()
        return

    item.quantity = qty
    if item.discount_amount > item.base_amount:
        item.discount_amount = item.base_amount
    item.save(update_fields=["quantity", "discount_amount"])


def remove_item(cart: Cart, *, item_id) -> None:
    _get_item(cart, item_id).delete()


def clear_cart(cart: Cart) -> None:
    cart.items.all().delete()


def set_item_discount(cart: Cart, *, item_id, amount) -> None:
    discount = _to_decimal(amount, field="amount")
    item = _get_item(cart, item_id)

    if discount < 0:
        raise POSValidationError("Discount cannot be negative")
    if discount > item.base_amount:
        raise POSValidationError("Discount cannot exceed the line amount")

    item.discount_amount = discount
    item.save(update_fields=["discount_amount"])


def set_customer(cart: Cart, *, customer_id=None) -> None:
    if customer_id in (None, ""):
        cart.customer = None
    else:
        customer = Customer.objects.filter(
            organization_id=cart.organization_id,
            id=customer_id,
            is_active=True,
        ).first()
        if customer is None:
            raise POSValidationError(f"Customer {customer_id} not found")
        cart.customer = customer

    cart.save(update_fields=["customer", "updated_at"])


def set_tax_included(cart: Cart, *, tax_included) -> None:
    if not isinstance(tax_included, bool):
        raise POSValidationError("tax_included must be a boolean")

    cart.tax_included = tax_included
    cart.save(update_fields=["tax_included", "updated_at"])


def set_applied_taxes(cart: Cart, *, tax_ids) -> None:
    if not isinstance(tax_ids, (list, tuple)):
        raise POSValidationError("tax_ids must be a list")

    requested = {str(x) for x in tax_ids}
    known = {str(t.id) for t in get_organization_taxes(organization=cart.organization)}

    unknown = sorted(requested - known)
    if unknown:
        raise POSValidationError(f"Unknown or inactive taxes: {', '.join(unknown)}")

    cart.applied_tax_ids = sorted(requested)
    cart.save(update_fields=["applied_tax_ids", "updated_at"])


MUTATIONS = {
    "add_item": add_item,
    "update_item_quantity": update_item_quantity,
    "remove_item": remove_item,
    "clear_cart": clear_cart,
    "set_item_discount": set_item_discount,
    "set_customer": set_customer,
    "set_tax_included": set_tax_included,
    "set_applied_taxes": set_applied_taxes,
}


@transaction.atomic
def mutate_cart(*, scope, cart_id, op: dict) -> Cart:
    """
    Apply one mutation to an active cart and return it with fresh totals.
    """
    if not isinstance(op, dict):
        raise POSValidationError("op must be an object")

    args = dict(op)
    op_type = str(args.pop("type", "") or "").strip()
    handler = MUTATIONS.get(op_type)
    if handler is None:
        raise POSValidationError(f"Unknown cart operation: '{op_type}'")

    cart = get_cart(scope=scope, cart_id=cart_id, lock=True)
    ensure_active(cart)

    try:
        inspect.signature(handler).bind(cart, **args)
    except TypeError as exc:
        raise POSValidationError(f"Invalid arguments for '{op_type}': {exc}") from exc

    try:
        handler(cart, **args)
    except DjangoValidationError as exc:
        raise POSValidationError("; ".join(exc.messages)) from exc

    return recalculate_cart(cart)


# =====================================================
# HOLD / ACTIVATE
# =====================================================

@transaction.atomic
def hold_cart(*, scope, cart_id, reason: str = "") -> Cart:
    cart = get_cart(scope=scope, cart_id=cart_id, lock=True)
    apply_transition(cart=cart, target_status=Cart.STATUS_HOLD, reason=(reason or "").strip())

    logger.info("POS cart put on hold", extra={"cart_id": str(cart.id)})
    return cart


@transaction.atomic
def activate_cart(*, scope, cart_id) -> Cart:
    cart = get_cart(scope=scope, cart_id=cart_id, lock=True)
    apply_transition(cart=cart, target_status=Cart.STATUS_ACTIVE, reason="")

    # Taxes are re-read on reactivation.
    return recalculate_cart(cart)
