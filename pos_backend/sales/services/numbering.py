"""
PATH: sales/services/numbering.py

SEQUENCE GENERATOR

- next_invoice_number(organization)        -> "FACT-000001"
- next_credit_note_number(organization)    -> "NC-000001"

Numbers are monotonic and collision-free per organization: the counter row
is locked for the rest of the caller's transaction, and a rollback also
rolls back the increment (no gaps from failed pipelines).
"""

from __future__ import annotations

from django.db import transaction

from pos.conf import pos_setting
from sales.models import DocumentSequence


def _format(prefix: str, value: int) -> str:
    return f"{prefix}-{value:06d}"


@transaction.atomic
def next_document_number(*, organization, kind: str, prefix: str) -> str:
    prefix = (prefix or "").strip().upper()
    if not prefix:
        raise ValueError("Document prefix is required")

    seq, _ = DocumentSequence.objects.select_for_update().get_or_create(
        organization=organization,
        kind=kind,
        prefix=prefix,
    )

    seq.last_value = int(seq.last_value) + 1
    seq.save(update_fields=["last_value", "updated_at"])

    return _format(prefix, seq.last_value)


def next_invoice_number(*, organization, prefix: str | None = None) -> str:
    return next_document_number(
        organization=organization,
        kind=DocumentSequence.KIND_INVOICE,
        prefix=prefix or pos_setting("INVOICE_PREFIX"),
    )


def next_credit_note_number(*, organization) -> str:
    return next_document_number(
        organization=organization,
        kind=DocumentSequence.KIND_CREDIT_NOTE,
        prefix=pos_setting("CREDIT_NOTE_PREFIX"),
    )
