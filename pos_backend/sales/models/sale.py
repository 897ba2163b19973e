# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from customers.models import Customer
from organizations.models import Branch, Organization

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Persisted POS transaction header.

    GUARANTEES:
    - Totals mirror the cart at the moment of checkout / hold-with-debt
    - balance is what the customer still owes on this sale
    - Once paid, financial totals are immutable

    STATUS:
    - pending: money still owed (credit sale, partial checkout)
    - paid: balance is zero
    - cancelled: voided
    """

    STATUS_PENDING = "pending"
    STATUS_PAID = "paid"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PAID, "Paid"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    PAYMENT_PENDING = "pending"
    PAYMENT_PARTIAL = "partial"
    PAYMENT_PAID = "paid"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PARTIAL, "Partial"),
        (PAYMENT_PAID, "Paid"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="sales",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sales",
        help_text="Cashier / staff who processed the sale",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )

    source_cart = models.ForeignKey(
        "pos.Cart",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
    )

    sale_date = models.DateTimeField(default=timezone.now)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    payment_status = models.CharField(
        max_length=16,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PENDING,
    )

    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organization", "status"], name="sale_org_status_idx"),
            models.Index(fields=["customer", "status"], name="sale_customer_status_idx"),
        ]

    _IMMUTABLE_FIELDS_AFTER_PAID = (
        "subtotal",
        "tax_total",
        "discount_total",
        "total",
    )

    def _validate_immutable(self, previous: "Sale"):
        if previous.status != self.STATUS_PAID:
            return

        for field in self._IMMUTABLE_FIELDS_AFTER_PAID:
            if getattr(self, field) != getattr(previous, field):
                raise ValueError(
                    f"Sale is immutable once paid. Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        super().save(*args, **kwargs)

    def __str__(self):
        return f"Sale {self.id} | {self.total} | {self.status}"
