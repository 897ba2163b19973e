# sales/services/credit_note_orchestrator.py

"""
CREDIT NOTE ORCHESTRATOR (REVERSAL PIPELINE)

Purpose:
- Reverse a debt invoice of a cart held with debt.

Steps (one DB transaction):
1) Cart must be hold_with_debt
2) Resolve the originating pending Sale (cart link first, then the latest
   pending sale of the cart's customer) and its invoice
3) Allocate the next credit note number
4) Create the credit note: every monetary field negated, balance 0,
   related_invoice -> original
5) Mirror the invoice items with negated qty, total_line, discount_amount
6) Zero balance + status paid on the invoice, the sale and the receivable
7) Cart -> cancelled

Invariants after success:
- credit_note.total == -invoice.total
- invoice.balance == sale.balance == receivable.balance == 0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from accounting.services.exceptions import ReceivableNotFound
from accounting.services.receivable_service import get_receivable_for_invoice, settle_receivable
from pos.models import Cart
from pos.services.cart_lifecycle import apply_transition, validate_transition
from pos.services.cart_store import get_cart
from pos.services.exceptions import GuardViolation
from sales.models import InvoiceItem, Sale, SalesInvoice

from .numbering import next_credit_note_number
from .steps import StepRunner

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass
class CreditNoteResult:
    cart: Cart
    credit_note: SalesInvoice
    invoice: SalesInvoice
    sale: Sale
    receivable: object | None


def resolve_originating_sale(cart: Cart) -> Sale:
    pending = Sale.objects.select_for_update().filter(
        organization_id=cart.organization_id,
        status=Sale.STATUS_PENDING,
    )

    sale = pending.filter(source_cart=cart).order_by("-created_at").first()
    if sale is None and cart.customer_id:
        sale = pending.filter(customer_id=cart.customer_id).order_by("-created_at").first()

    if sale is None:
        raise GuardViolation(f"No pending sale found for cart {cart.id}")
    return sale


def _create_credit_note(*, invoice: SalesInvoice, sale: Sale, scope, reason: str) -> SalesInvoice:
    today = timezone.localdate()

    return SalesInvoice.objects.create(
        organization=invoice.organization,
        branch=invoice.branch,
        sale=sale,
        customer=invoice.customer,
        number=next_credit_note_number(organization=invoice.organization),
        document_type=SalesInvoice.DOCUMENT_CREDIT_NOTE,
        related_invoice=invoice,
        issue_date=today,
        due_date=today,
        currency=invoice.currency,
        payment_method=invoice.payment_method,
        payment_terms=0,
        tax_included=invoice.tax_included,
        subtotal=-invoice.subtotal,
        tax_total=-invoice.tax_total,
        discount_total=-invoice.discount_total,
        total=-invoice.total,
        balance=ZERO,
        status=SalesInvoice.STATUS_ISSUED,
        description=f"Credit note for {invoice.number}"[:255],
        notes=reason,
        created_by=scope.user,
    )


def _create_credit_note_items(*, credit_note: SalesInvoice, items) -> list[InvoiceItem]:
    return [
        InvoiceItem.objects.create(
            invoice=credit_note,
            product_id=item.product_id,
            description=item.description,
            qty=-item.qty,
            unit_price=item.unit_price,
            tax_rate=item.tax_rate,
            tax_amount=-item.tax_amount,
            discount_amount=-item.discount_amount,
            total_line=-item.total_line,
            tax_included=item.tax_included,
        )
        for item in items
    ]


def _zero_balances(*, invoice: SalesInvoice, sale: Sale):
    invoice.balance = ZERO
    invoice.status = SalesInvoice.STATUS_PAID
    invoice.save(update_fields=["balance", "status", "updated_at"])

    sale.balance = ZERO
    sale.status = Sale.STATUS_PAID
    sale.payment_status = Sale.PAYMENT_PAID
    sale.save(update_fields=["balance", "status", "payment_status", "updated_at"])

    try:
        receivable = get_receivable_for_invoice(invoice_id=invoice.id)
    except ReceivableNotFound:
        logger.warning(
            "No receivable to settle for reversed invoice",
            extra={"invoice_id": str(invoice.id), "invoice_number": invoice.number},
        )
        return None

    return settle_receivable(receivable)


@transaction.atomic
def cancel_debt_with_credit_note(*, scope, cart_id, reason: str = "") -> CreditNoteResult:
    cart = get_cart(scope=scope, cart_id=cart_id, lock=True)
    validate_transition(cart=cart, target_status=Cart.STATUS_CANCELLED)

    sale = resolve_originating_sale(cart)

    invoice = (
        SalesInvoice.objects.select_for_update()
        .filter(sale=sale, document_type=SalesInvoice.DOCUMENT_INVOICE)
        .order_by("-created_at")
        .first()
    )
    if invoice is None:
        raise GuardViolation(f"No invoice found for sale {sale.id}")

    items = list(invoice.items.all())
    reason = (reason or "").strip() or f"Debt cancelled for invoice {invoice.number}"

    runner = StepRunner("credit_note", cart_id=cart.id, invoice_id=invoice.id)

    credit_note = runner.required(
        "create_credit_note",
        _create_credit_note,
        invoice=invoice,
        sale=sale,
        scope=scope,
        reason=reason,
    )
    runner.required("create_credit_note_items", _create_credit_note_items, credit_note=credit_note, items=items)
    receivable = runner.required("zero_balances", _zero_balances, invoice=invoice, sale=sale)

    notes = (cart.notes or "").rstrip()
    notes = f"{notes}\nCredit note: {credit_note.number}" if notes else f"Credit note: {credit_note.number}"

    apply_transition(cart=cart, target_status=Cart.STATUS_CANCELLED, reason=reason[:255], notes=notes)

    logger.info(
        "Debt reversed with credit note",
        extra={
            "cart_id": str(cart.id),
            "invoice_number": invoice.number,
            "credit_note_number": credit_note.number,
        },
    )

    return CreditNoteResult(
        cart=cart,
        credit_note=credit_note,
        invoice=invoice,
        sale=sale,
        receivable=receivable,
    )
