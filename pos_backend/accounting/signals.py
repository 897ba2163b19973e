"""
PATH: accounting/signals.py

RECEIVABLE TRIGGER

Materializes an AccountReceivable whenever an issued sales invoice with a
customer is inserted. Runs inside the transaction of the invoice insert.

Rules:
- Inserts only (updates never create receivables)
- Only document_type=invoice with status=issued (credit sales);
  checkout invoices are paid/partial and credit notes are excluded
- Idempotent: one receivable per invoice
- Disabled when POS["RECEIVABLE_TRIGGER_ENABLED"] is false
"""

from __future__ import annotations

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from pos.conf import pos_setting
from sales.models import SalesInvoice

from .models import AccountReceivable

logger = logging.getLogger(__name__)


@receiver(post_save, sender=SalesInvoice, dispatch_uid="accounting.receivable_on_invoice_insert")
def create_receivable_for_issued_invoice(sender, instance: SalesInvoice, created: bool, raw: bool = False, **kwargs):
    if raw or not created:
        return

    if not pos_setting("RECEIVABLE_TRIGGER_ENABLED"):
        return

    if (
        instance.document_type != SalesInvoice.DOCUMENT_INVOICE
        or instance.status != SalesInvoice.STATUS_ISSUED
        or not instance.customer_id
    ):
        return

    receivable, was_created = AccountReceivable.objects.get_or_create(
        invoice=instance,
        defaults={
            "organization_id": instance.organization_id,
            "branch_id": instance.branch_id,
            "customer_id": instance.customer_id,
            "sale_id": instance.sale_id,
            "amount": instance.total,
            "balance": instance.balance,
            "due_date": instance.due_date,
            "status": AccountReceivable.STATUS_PENDING,
        },
    )

    if was_created:
        logger.info(
            "Receivable materialized for issued invoice",
            extra={"invoice_id": str(instance.id), "receivable_id": str(receivable.id)},
        )
