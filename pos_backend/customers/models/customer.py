# customers/models/customer.py

import uuid

from django.db import models

from organizations.models import Organization


class Customer(models.Model):
    """
    Buyer that a cart can be attached to.

    A customer is required for credit sales: hold-with-debt and any partial
    settlement that opens a receivable.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="customers",
    )

    full_name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    document_number = models.CharField(max_length=50, blank=True, db_index=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name"]
        indexes = [
            models.Index(fields=["organization", "full_name"], name="customer_org_name_idx"),
        ]

    def __str__(self):
        return self.full_name
