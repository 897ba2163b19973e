# sales/models/payment.py

import uuid
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from organizations.models import Branch, Organization

User = settings.AUTH_USER_MODEL


@dataclass(frozen=True)
class PaymentSource:
    """
    What a payment belongs to: kind is "invoice" or "sale".
    """

    kind: str
    id: uuid.UUID


class Payment(models.Model):
    """
    One collected payment entry.

    RULES:
    - Belongs to exactly one of: an invoice (normal case) or a sale
      (fallback when no invoice could be written). DB-enforced.
    - amount > 0; card/transfer/bank carry a reference.
    """

    METHOD_CASH = "cash"
    METHOD_CARD = "card"
    METHOD_TRANSFER = "transfer"
    METHOD_BANK = "bank"

    METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_CARD, "Card"),
        (METHOD_TRANSFER, "Transfer"),
        (METHOD_BANK, "Bank"),
    ]

    METHODS_REQUIRING_REFERENCE = {METHOD_CARD, METHOD_TRANSFER, METHOD_BANK}

    STATUS_COMPLETED = "completed"
    STATUS_VOIDED = "voided"

    STATUS_CHOICES = [
        (STATUS_COMPLETED, "Completed"),
        (STATUS_VOIDED, "Voided"),
    ]

    SOURCE_INVOICE = "invoice"
    SOURCE_SALE = "sale"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="payments",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )

    invoice = models.ForeignKey(
        "sales.SalesInvoice",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
    )

    method = models.CharField(max_length=16, choices=METHOD_CHOICES)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3)
    reference = models.CharField(max_length=128, blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_COMPLETED,
    )

    received_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_received",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(sale__isnull=False, invoice__isnull=True)
                    | Q(sale__isnull=True, invoice__isnull=False)
                ),
                name="payment_exactly_one_source",
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=Decimal("0.00")),
                name="payment_amount_positive",
            ),
        ]

    @property
    def source(self) -> PaymentSource:
        if self.invoice_id:
            return PaymentSource(kind=self.SOURCE_INVOICE, id=self.invoice_id)
        return PaymentSource(kind=self.SOURCE_SALE, id=self.sale_id)

    def __str__(self):
        return f"{self.method} | {self.amount} | {self.source.kind}"
