"""
CART LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Cart entities, plus the guards attached to them.

    active -> hold -> active
    active -> hold_with_debt -> cancelled   (cancel via credit note)
    active -> completed                      (via checkout)

DESIGN PRINCIPLES:
- validate_* and check_* functions never write
- apply_transition() is the single place a status is written
"""

from decimal import Decimal

from pos.models import Cart

from .exceptions import GuardViolation, InvalidCartTransitionError

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Cart.STATUS_COMPLETED,
    Cart.STATUS_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    Cart.STATUS_ACTIVE: {
        Cart.STATUS_HOLD,
        Cart.STATUS_HOLD_WITH_DEBT,
        Cart.STATUS_COMPLETED,
    },
    Cart.STATUS_HOLD: {
        Cart.STATUS_ACTIVE,
    },
    Cart.STATUS_HOLD_WITH_DEBT: {
        Cart.STATUS_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, cart: Cart, target_status: str):
    if not can_transition(from_status=cart.status, to_status=target_status):
        raise InvalidCartTransitionError(
            f"Cart {cart.id} cannot transition from "
            f"'{cart.status}' to '{target_status}'"
        )


def ensure_active(cart: Cart):
    if cart.status != Cart.STATUS_ACTIVE:
        raise GuardViolation(f"Cart {cart.id} is '{cart.status}'; only active carts can be modified")


def check_hold_with_debt_guard(cart: Cart):
    """
    Preconditions of active -> hold_with_debt, reported one at a time.
    """
    if cart.status != Cart.STATUS_ACTIVE:
        raise GuardViolation(
            f"Only active carts can be held with debt (current status: '{cart.status}')"
        )

    if not cart.customer_id:
        raise GuardViolation("A customer is required to hold a cart with debt")

    if cart.is_empty:
        raise GuardViolation("Cannot hold an empty cart with debt")

    if Decimal(cart.total or 0) <= Decimal("0"):
        raise GuardViolation("Cart total must be greater than zero to hold with debt")


def check_completion_guard(*, total: Decimal, total_paid: Decimal):
    if total_paid < total:
        raise GuardViolation(
            f"Payments ({total_paid}) do not cover the cart total ({total})"
        )


def apply_transition(*, cart: Cart, target_status: str, reason: str | None = None, notes: str | None = None) -> Cart:
    validate_transition(cart=cart, target_status=target_status)

    cart.status = target_status
    update_fields = ["status", "updated_at"]

    if reason is not None:
        cart.hold_reason = reason
        update_fields.append("hold_reason")
    if notes is not None:
        cart.notes = notes
        update_fields.append("notes")

    cart.save(update_fields=update_fields)
    return cart
