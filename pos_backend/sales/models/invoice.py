"""
PATH: sales/models/invoice.py

SALES INVOICE + INVOICE ITEM

Document types:
- invoice: issued for a sale (paid/partial at checkout, issued on credit)
- credit_note: negated mirror of an invoice, linked via related_invoice

Rules:
- number is unique per organization (allocated by DocumentSequence)
- credit notes carry negative subtotal/tax_total/total and zero balance
- inserting an issued invoice for a customer materializes its
  AccountReceivable (see accounting/signals.py)
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from customers.models import Customer
from organizations.models import Branch, Organization
from products.models import Product

from .sale import Sale

User = settings.AUTH_USER_MODEL


class SalesInvoice(models.Model):
    DOCUMENT_INVOICE = "invoice"
    DOCUMENT_CREDIT_NOTE = "credit_note"

    DOCUMENT_TYPE_CHOICES = [
        (DOCUMENT_INVOICE, "Invoice"),
        (DOCUMENT_CREDIT_NOTE, "Credit note"),
    ]

    STATUS_DRAFT = "draft"
    STATUS_ISSUED = "issued"
    STATUS_PARTIAL = "partial"
    STATUS_PAID = "paid"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_ISSUED, "Issued"),
        (STATUS_PARTIAL, "Partially paid"),
        (STATUS_PAID, "Paid"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="sales_invoices",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales_invoices",
    )

    sale = models.ForeignKey(
        Sale,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )

    number = models.CharField(max_length=32)

    document_type = models.CharField(
        max_length=16,
        choices=DOCUMENT_TYPE_CHOICES,
        default=DOCUMENT_INVOICE,
    )

    related_invoice = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="credit_notes",
    )

    issue_date = models.DateField(default=timezone.localdate)
    due_date = models.DateField()

    currency = models.CharField(max_length=3)
    payment_method = models.CharField(max_length=16, default="cash")
    payment_terms = models.PositiveIntegerField(default=0, help_text="Days until due")
    tax_included = models.BooleanField(default=False)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
    )

    description = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales_invoices",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "number"],
                name="uniq_sales_invoice_number_per_org",
            ),
        ]

    @property
    def is_credit_note(self) -> bool:
        return self.document_type == self.DOCUMENT_CREDIT_NOTE

    def __str__(self):
        return f"{self.number} | {self.document_type} | {self.total}"


class InvoiceItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice = models.ForeignKey(
        SalesInvoice,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoice_items",
    )

    description = models.CharField(max_length=500, blank=True)

    # Negative on credit notes
    qty = models.IntegerField()

    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    tax_rate = models.DecimalField(max_digits=9, decimal_places=4, default=Decimal("0"))
    tax_amount = models.DecimalField(max_digits=20, decimal_places=6, default=Decimal("0"))
    discount_amount = models.DecimalField(max_digits=20, decimal_places=6, default=Decimal("0"))
    total_line = models.DecimalField(max_digits=20, decimal_places=6, default=Decimal("0"))
    tax_included = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.description or self.product_id} x {self.qty}"
