"""
PATH: sales/services/invoice_lookup.py

INVOICE POINTER + LOOKUP

A cart held with debt carries a pointer to its invoice in its notes:

    Invoice: FACT-000042 | Due: 2026-11-18

get_invoice_for_cart() parses that pointer back and returns the invoice,
its items, its customer and its payments (read-only).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from pos.services.cart_store import get_cart
from pos.services.exceptions import InvoiceNotFoundError
from sales.models import SalesInvoice

POINTER_RE = re.compile(r"Invoice:\s*(?P<number>[^\s|]+)(?:\s*\|\s*Due:\s*(?P<due>\d{4}-\d{2}-\d{2}))?")


def format_invoice_pointer(*, number: str, due_date: date) -> str:
    return f"Invoice: {number} | Due: {due_date.isoformat()}"


def parse_invoice_pointer(notes: str) -> tuple[str, date | None] | None:
    match = POINTER_RE.search(notes or "")
    if match is None:
        return None

    due = match.group("due")
    return match.group("number"), (date.fromisoformat(due) if due else None)


@dataclass(frozen=True)
class InvoiceLookup:
    invoice: SalesInvoice
    items: list
    customer: object
    payments: list


def get_invoice_for_cart(*, scope, cart_id) -> InvoiceLookup:
    cart = get_cart(scope=scope, cart_id=cart_id)

    pointer = parse_invoice_pointer(cart.notes)
    if pointer is None:
        raise InvoiceNotFoundError(f"Cart {cart.id} has no invoice reference")

    number, _due = pointer
    invoice = (
        SalesInvoice.objects.select_related("customer")
        .filter(
            organization_id=cart.organization_id,
            number=number,
            document_type=SalesInvoice.DOCUMENT_INVOICE,
        )
        .first()
    )
    if invoice is None:
        raise InvoiceNotFoundError(f"Invoice {number} not found")

    return InvoiceLookup(
        invoice=invoice,
        items=list(invoice.items.all()),
        customer=invoice.customer,
        payments=list(invoice.payments.all()),
    )
