# sales/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATOR (SETTLEMENT PIPELINE)

Purpose:
- Finalize an active cart into Sale + SaleItems + SalesInvoice +
  InvoiceItems + Payments (+ AccountReceivable when undercollected).

Money:
- total_paid = sum(amount); remaining = max(0, total - total_paid);
  change = max(0, total_paid - total)
- Only cash may exceed what is still owed (it produces change).
- Checkout requires total_paid >= total unless allow_partial=True.

Steps (strictly sequential, one DB transaction):
  required     create_sale, create_sale_items, create_payments, open_receivable
  best_effort  create_invoice, create_invoice_items

Notes:
- Best-effort steps run in savepoints; their failure leaves the sale intact
  and is reported in SettlementResult.steps.
- Payments attach to the invoice when it exists, else to the sale.
- The receivable (undercollected + customer) is written against the sale
  and linked to the invoice when there is one.
- The cart is only marked completed after every required step succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from accounting.services.receivable_service import open_settlement_receivable
from organizations.services.currency import get_base_currency
from pos.models import Cart
from pos.services.cart_lifecycle import apply_transition, check_completion_guard, validate_transition
from pos.services.cart_store import get_cart, recalculate_cart
from pos.services.exceptions import GuardViolation, PaymentValidationError
from sales.models import Payment, Sale, SalesInvoice

from .documents import create_invoice_items, create_sale_items
from .numbering import next_invoice_number
from .steps import StepRunner

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(v) -> Decimal:
    if v is None or v == "":
        return ZERO
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


# =====================================================
# PAYMENT ENTRIES
# =====================================================

@dataclass(frozen=True)
class PaymentEntry:
    method: str
    amount: Decimal
    reference: str = ""


def normalize_payments(payments, *, total: Decimal) -> list[PaymentEntry]:
    """
    payments: list of dicts {method, amount, reference?}

    - zero-amount entries are dropped
    - negative amounts, unknown methods and missing references are rejected
    - a non-cash entry may not exceed what is still owed at that point
    """
    valid_methods = {m for m, _ in Payment.METHOD_CHOICES}
    out: list[PaymentEntry] = []
    collected = ZERO

    for idx, p in enumerate(payments or []):
        if not isinstance(p, dict):
            raise PaymentValidationError(f"Payment at index {idx} must be an object")

        method = str(p.get("method", "") or "").strip().lower()
        if method not in valid_methods:
            raise PaymentValidationError(f"Invalid payment method at index {idx}: '{method}'")

        try:
            amount = _money(p.get("amount"))
        except (InvalidOperation, ValueError):
            raise PaymentValidationError(f"Invalid payment amount at index {idx}")

        if amount < ZERO:
            raise PaymentValidationError(f"Payment amount at index {idx} must be greater than zero")
        if amount == ZERO:
            continue

        reference = str(p.get("reference", "") or "").strip()
        if method in Payment.METHODS_REQUIRING_REFERENCE and not reference:
            raise PaymentValidationError(f"A reference is required for {method} payments")

        owed = max(ZERO, total - collected)
        if method != Payment.METHOD_CASH and amount > owed:
            raise PaymentValidationError("Payment amount exceeds remaining balance")

        collected += amount
        out.append(PaymentEntry(method=method, amount=amount, reference=reference))

    return out


def _invoice_payment_method(entries: list[PaymentEntry]) -> str:
    methods = {e.method for e in entries}
    if len(methods) == 1:
        return methods.pop()
    if not methods:
        return "credit"
    return "mixed"


# =====================================================
# RESULT
# =====================================================

@dataclass
class SettlementResult:
    sale: Sale
    invoice: SalesInvoice | None
    payments: list
    receivable: object | None
    total_paid: Decimal
    change: Decimal
    remaining: Decimal
    steps: list = field(default_factory=list)

    @property
    def degraded_steps(self) -> list[str]:
        return [s.name for s in self.steps if not s.ok]


# =====================================================
# STEPS
# =====================================================

def _create_sale(*, cart: Cart, scope, remaining: Decimal, total_paid: Decimal) -> Sale:
    if remaining > ZERO:
        status = Sale.STATUS_PENDING
        payment_status = Sale.PAYMENT_PARTIAL if total_paid > ZERO else Sale.PAYMENT_PENDING
    else:
        status = Sale.STATUS_PAID
        payment_status = Sale.PAYMENT_PAID

    return Sale.objects.create(
        organization=cart.organization,
        branch=cart.branch,
        user=scope.user,
        customer=cart.customer,
        source_cart=cart,
        subtotal=cart.subtotal,
        tax_total=cart.tax_total,
        discount_total=cart.discount_total,
        total=cart.total,
        balance=remaining,
        status=status,
        payment_status=payment_status,
        notes=cart.notes,
    )


def _create_invoice(*, cart: Cart, sale: Sale, scope, entries, remaining: Decimal) -> SalesInvoice:
    today = timezone.localdate()

    return SalesInvoice.objects.create(
        organization=cart.organization,
        branch=cart.branch,
        sale=sale,
        customer=cart.customer,
        number=next_invoice_number(organization=cart.organization),
        document_type=SalesInvoice.DOCUMENT_INVOICE,
        issue_date=today,
        due_date=today,
        currency=get_base_currency(cart.organization).code,
        payment_method=_invoice_payment_method(entries),
        payment_terms=0,
        tax_included=cart.tax_included,
        subtotal=cart.subtotal,
        tax_total=cart.tax_total,
        discount_total=cart.discount_total,
        total=cart.total,
        balance=remaining,
        status=SalesInvoice.STATUS_PARTIAL if remaining > ZERO else SalesInvoice.STATUS_PAID,
        description="POS sale",
        created_by=scope.user,
    )


def _create_payments(*, cart: Cart, sale: Sale, invoice, entries, scope) -> list[Payment]:
    currency = get_base_currency(cart.organization).code

    target = {"invoice": invoice} if invoice is not None else {"sale": sale}

    return [
        Payment.objects.create(
            organization=cart.organization,
            branch=cart.branch,
            method=e.method,
            amount=e.amount,
            currency=currency,
            reference=e.reference,
            received_by=scope.user,
            **target,
        )
        for e in entries
    ]


# =====================================================
# ORCHESTRATOR
# =====================================================

@transaction.atomic
def settle(*, scope, cart_id, payments, allow_partial: bool = False) -> SettlementResult:
    cart = get_cart(scope=scope, cart_id=cart_id, lock=True)

    validate_transition(cart=cart, target_status=Cart.STATUS_COMPLETED)

    cart_items = list(cart.items.select_related("product").order_by("created_at"))
    if not cart_items:
        raise GuardViolation("Cart is empty")

    cart = recalculate_cart(cart)
    cart_items = list(cart.items.order_by("created_at"))
    total = _money(cart.total)

    entries = normalize_payments(payments, total=total)

    total_paid = _money(sum((e.amount for e in entries), ZERO))
    remaining = max(ZERO, total - total_paid)
    change = max(ZERO, total_paid - total)

    if not allow_partial:
        check_completion_guard(total=total, total_paid=total_paid)

    runner = StepRunner("settlement", cart_id=cart.id)

    sale = runner.required(
        "create_sale",
        _create_sale,
        cart=cart,
        scope=scope,
        remaining=remaining,
        total_paid=total_paid,
    )
    runner.required("create_sale_items", create_sale_items, sale=sale, cart_items=cart_items)

    invoice = runner.best_effort(
        "create_invoice",
        _create_invoice,
        cart=cart,
        sale=sale,
        scope=scope,
        entries=entries,
        remaining=remaining,
    )

    if invoice is not None:
        runner.best_effort("create_invoice_items", create_invoice_items, invoice=invoice, cart_items=cart_items)
    else:
        runner.skipped("create_invoice_items", "no invoice")

    payment_rows = runner.required(
        "create_payments",
        _create_payments,
        cart=cart,
        sale=sale,
        invoice=invoice,
        entries=entries,
        scope=scope,
    )

    receivable = None
    if remaining > ZERO and cart.customer_id:
        receivable = runner.required(
            "open_receivable",
            open_settlement_receivable,
            sale=sale,
            invoice=invoice,
            customer=cart.customer,
            balance=remaining,
        )

    apply_transition(cart=cart, target_status=Cart.STATUS_COMPLETED)

    logger.info(
        "POS checkout settled",
        extra={
            "cart_id": str(cart.id),
            "sale_id": str(sale.id),
            "total": str(total),
            "total_paid": str(total_paid),
            "remaining": str(remaining),
            "degraded_steps": runner.degraded,
        },
    )

    return SettlementResult(
        sale=sale,
        invoice=invoice,
        payments=payment_rows,
        receivable=receivable,
        total_paid=total_paid,
        change=change,
        remaining=remaining,
        steps=runner.outcomes,
    )
