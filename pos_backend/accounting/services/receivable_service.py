"""
======================================================
PATH: accounting/services/receivable_service.py
======================================================
RECEIVABLE SERVICE

Purpose:
- get_receivable_for_invoice(): idempotent single read
- fetch_receivable_for_invoice(): bounded read-back of the receivable the
  trigger writes for a debt invoice (attempts/delay from POS settings)
- open_settlement_receivable(): receivable for an undercollected checkout
- settle_receivable(): zero the balance and mark paid (credit note reversal)
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from accounting.models import AccountReceivable
from pos.conf import pos_setting

from .exceptions import ReceivableNotFound

logger = logging.getLogger(__name__)


def get_receivable_for_invoice(*, invoice_id) -> AccountReceivable:
    receivable = AccountReceivable.objects.filter(invoice_id=invoice_id).first()
    if receivable is None:
        raise ReceivableNotFound(f"No receivable for invoice {invoice_id}")
    return receivable


def fetch_receivable_for_invoice(*, invoice_id, attempts: int | None = None, delay: float | None = None) -> AccountReceivable:
    """
    Read the trigger-created receivable, retrying with a fixed delay.

    Raises ReceivableNotFound after the last attempt.
    """
    attempts = int(attempts if attempts is not None else pos_setting("RECEIVABLE_FETCH_ATTEMPTS"))
    delay = float(delay if delay is not None else pos_setting("RECEIVABLE_FETCH_DELAY_SECONDS"))
    attempts = max(1, attempts)

    for attempt in range(1, attempts + 1):
        try:
            return get_receivable_for_invoice(invoice_id=invoice_id)
        except ReceivableNotFound:
            logger.warning(
                "Receivable not visible yet",
                extra={"invoice_id": str(invoice_id), "attempt": attempt, "attempts": attempts},
            )
            if attempt < attempts and delay > 0:
                time.sleep(delay)

    raise ReceivableNotFound(
        f"Receivable for invoice {invoice_id} not found after {attempts} attempts"
    )


def open_settlement_receivable(*, sale, customer, balance: Decimal, invoice=None, days: int | None = None) -> AccountReceivable:
    """
    amount is the sale total; balance is what checkout left unpaid.
    invoice is None when the invoice step degraded.
    """
    days = int(days if days is not None else pos_setting("SETTLEMENT_RECEIVABLE_DAYS"))

    return AccountReceivable.objects.create(
        organization_id=sale.organization_id,
        branch_id=sale.branch_id,
        customer=customer,
        invoice=invoice,
        sale=sale,
        amount=sale.total,
        balance=balance,
        due_date=timezone.localdate() + timedelta(days=days),
        status=AccountReceivable.STATUS_PARTIAL,
    )


def settle_receivable(receivable: AccountReceivable) -> AccountReceivable:
    receivable.balance = Decimal("0.00")
    receivable.status = AccountReceivable.STATUS_PAID
    receivable.save(update_fields=["balance", "status", "updated_at"])
    return receivable
