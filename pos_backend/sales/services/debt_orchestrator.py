# sales/services/debt_orchestrator.py

"""
HOLD-WITH-DEBT ORCHESTRATOR (DEBT PIPELINE)

Purpose:
- Turn an active cart into a credit sale: pending Sale, issued invoice
  (payment_method=credit), invoice + sale items, and the receivable the
  trigger writes for the invoice.

Steps (strictly sequential, one DB transaction):
1) Guards: status active, customer present, items present, total > 0
2) Recompute taxes and totals
3) create_sale (pending)
4) create_invoice (issued, due = today + payment_terms)
5) create_invoice_items, create_sale_items
6) fetch_receivable: read back the trigger-created receivable with bounded
   retries; never written here
7) Cart -> hold_with_debt with reason + invoice pointer in notes

Failure:
- Any required step failure or ConsistencyTimeout rolls the whole
  transaction back: no sale, invoice or receivable survives and the cart
  stays active.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.exceptions import ReceivableNotFound
from accounting.services.receivable_service import fetch_receivable_for_invoice
from organizations.services.currency import get_base_currency
from pos.conf import pos_setting
from pos.models import Cart
from pos.services.cart_lifecycle import apply_transition, check_hold_with_debt_guard
from pos.services.cart_store import get_cart, recalculate_cart
from pos.services.exceptions import ConsistencyTimeout, GuardViolation, POSValidationError
from sales.models import Sale, SalesInvoice

from .documents import create_invoice_items, create_sale_items
from .invoice_lookup import format_invoice_pointer
from .numbering import next_invoice_number
from .steps import StepRunner

logger = logging.getLogger(__name__)


@dataclass
class DebtHoldResult:
    cart: Cart
    sale: Sale
    invoice: SalesInvoice
    receivable: object


def _payment_terms(value) -> int:
    if value in (None, ""):
        return int(pos_setting("DEFAULT_PAYMENT_TERMS_DAYS"))
    try:
        terms = int(value)
    except (TypeError, ValueError):
        raise POSValidationError("payment_terms must be a whole number of days")
    if terms < 0:
        raise POSValidationError("payment_terms cannot be negative")
    return terms


def _create_sale(*, cart: Cart, scope, notes: str) -> Sale:
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
        balance=cart.total,
        status=Sale.STATUS_PENDING,
        payment_status=Sale.PAYMENT_PENDING,
        notes=notes,
    )


def _create_invoice(*, cart: Cart, sale: Sale, scope, payment_terms: int, reason: str, notes: str) -> SalesInvoice:
    today = timezone.localdate()

    return SalesInvoice.objects.create(
        organization=cart.organization,
        branch=cart.branch,
        sale=sale,
        customer=cart.customer,
        number=next_invoice_number(organization=cart.organization),
        document_type=SalesInvoice.DOCUMENT_INVOICE,
        issue_date=today,
        due_date=today + timedelta(days=payment_terms),
        currency=get_base_currency(cart.organization).code,
        payment_method="credit",
        payment_terms=payment_terms,
        tax_included=cart.tax_included,
        subtotal=cart.subtotal,
        tax_total=cart.tax_total,
        discount_total=cart.discount_total,
        total=cart.total,
        balance=cart.total,
        status=SalesInvoice.STATUS_ISSUED,
        description=reason[:255],
        notes=notes,
        created_by=scope.user,
    )


@transaction.atomic
def hold_cart_with_debt(*, scope, cart_id, reason: str, payment_terms=None, notes: str = "") -> DebtHoldResult:
    reason = (reason or "").strip()
    if not reason:
        raise POSValidationError("A reason is required to hold a cart with debt")

    terms = _payment_terms(payment_terms)
    notes = (notes or "").strip()

    cart = get_cart(scope=scope, cart_id=cart_id, lock=True)
    check_hold_with_debt_guard(cart)

    cart = recalculate_cart(cart)
    if Decimal(cart.total) <= Decimal("0"):
        raise GuardViolation("Cart total must be greater than zero to hold with debt")

    cart_items = list(cart.items.order_by("created_at"))
    runner = StepRunner("hold_with_debt", cart_id=cart.id)

    sale = runner.required("create_sale", _create_sale, cart=cart, scope=scope, notes=notes)
    invoice = runner.required(
        "create_invoice",
        _create_invoice,
        cart=cart,
        sale=sale,
        scope=scope,
        payment_terms=terms,
        reason=reason,
        notes=notes,
    )
    runner.required("create_invoice_items", create_invoice_items, invoice=invoice, cart_items=cart_items)
    runner.required("create_sale_items", create_sale_items, sale=sale, cart_items=cart_items)

    try:
        receivable = fetch_receivable_for_invoice(invoice_id=invoice.id)
    except ReceivableNotFound as exc:
        logger.error(
            "Receivable not materialized for debt invoice; rolling back",
            extra={"cart_id": str(cart.id), "invoice_id": str(invoice.id), "invoice_number": invoice.number},
        )
        raise ConsistencyTimeout(str(exc), step="fetch_receivable") from exc

    pointer = format_invoice_pointer(number=invoice.number, due_date=invoice.due_date)
    cart_notes = f"{pointer}\n{notes}" if notes else pointer

    apply_transition(
        cart=cart,
        target_status=Cart.STATUS_HOLD_WITH_DEBT,
        reason=reason,
        notes=cart_notes,
    )

    logger.info(
        "POS cart held with debt",
        extra={
            "cart_id": str(cart.id),
            "sale_id": str(sale.id),
            "invoice_number": invoice.number,
            "receivable_id": str(receivable.id),
        },
    )

    return DebtHoldResult(cart=cart, sale=sale, invoice=invoice, receivable=receivable)
