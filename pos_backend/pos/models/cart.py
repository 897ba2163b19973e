"""
PATH: pos/models/cart.py

CART MODEL

Purpose:
- In-progress sale aggregate, one row per cart (keyed storage).
- Totals are stored, recomputed by the cart store after every mutation.

Rules:
- status follows pos/services/cart_lifecycle.py (active, hold,
  hold_with_debt, completed, cancelled).
- Only active carts accept item/customer/tax mutations.
- completed and cancelled are terminal.
- notes may carry the invoice pointer "Invoice: <number> | Due: <date>"
  written by the debt pipeline.
"""

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Sum

from customers.models import Customer
from organizations.models import Branch, Organization

User = settings.AUTH_USER_MODEL


class Cart(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_HOLD = "hold"
    STATUS_HOLD_WITH_DEBT = "hold_with_debt"
    STATUS_COMPLETED = "completed"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = (
        (STATUS_ACTIVE, "Active"),
        (STATUS_HOLD, "On hold"),
        (STATUS_HOLD_WITH_DEBT, "Held with debt"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="carts",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="carts",
    )

    user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="carts",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="carts",
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE,
        db_index=True,
    )

    tax_included = models.BooleanField(default=False)

    # Organization taxes currently applied to lines without a product override
    applied_tax_ids = models.JSONField(default=list, blank=True)

    subtotal = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    tax_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    discount_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    hold_reason = models.CharField(max_length=255, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organization", "status"], name="cart_org_status_idx"),
        ]

    @property
    def item_count(self) -> int:
        total = self.items.aggregate(total=Sum("quantity")).get("total")
        return int(total or 0)

    @property
    def is_empty(self) -> bool:
        return not self.items.exists()

    def __str__(self):
        return f"Cart {self.id} | {self.status} | {self.total}"
