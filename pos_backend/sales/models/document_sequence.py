# sales/models/document_sequence.py

from django.db import models

from organizations.models import Organization


class DocumentSequence(models.Model):
    """
    Monotonic per-organization counter for invoice and credit note numbers.

    Rows are read under select_for_update by sales/services/numbering.py;
    last_value only ever increases.
    """

    KIND_INVOICE = "invoice"
    KIND_CREDIT_NOTE = "credit_note"

    KIND_CHOICES = [
        (KIND_INVOICE, "Invoice"),
        (KIND_CREDIT_NOTE, "Credit note"),
    ]

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="document_sequences",
    )

    kind = models.CharField(max_length=16, choices=KIND_CHOICES)
    prefix = models.CharField(max_length=16)
    last_value = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "kind", "prefix"],
                name="uniq_document_sequence",
            ),
        ]

    def __str__(self):
        return f"{self.prefix} ({self.kind}) @ {self.last_value}"
