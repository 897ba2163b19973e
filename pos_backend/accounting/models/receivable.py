# accounting/models/receivable.py

import uuid
from decimal import Decimal

from django.db import models

from customers.models import Customer
from organizations.models import Branch, Organization
from sales.models import Sale, SalesInvoice


class AccountReceivable(models.Model):
    """
    Money owed by a customer against one sale.

    Origins:
    - debt invoices: written by the receivable trigger (accounting/signals.py)
      when an issued invoice is inserted; application code only reads it back
    - partial checkouts: opened by the settlement pipeline against the sale,
      and linked to the invoice when one was issued

    A credit note reversal zeroes balance and marks it paid.
    """

    STATUS_PENDING = "pending"
    STATUS_PARTIAL = "partial"
    STATUS_PAID = "paid"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PARTIAL, "Partial"),
        (STATUS_PAID, "Paid"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="receivables",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="receivables",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="receivables",
    )

    invoice = models.OneToOneField(
        SalesInvoice,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="receivable",
    )

    sale = models.ForeignKey(
        Sale,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="receivables",
    )

    amount = models.DecimalField(max_digits=14, decimal_places=2)
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    due_date = models.DateField()

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["due_date"]
        indexes = [
            models.Index(fields=["organization", "status"], name="receivable_org_status_idx"),
            models.Index(fields=["customer", "status"], name="receivable_cust_status_idx"),
        ]

    def __str__(self):
        return f"AR {self.invoice_id or self.sale_id} | {self.balance} / {self.amount} | {self.status}"
