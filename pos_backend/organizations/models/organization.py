# organizations/models/organization.py

import uuid

from django.db import models


class Organization(models.Model):
    """
    Tenant that owns branches, catalog, taxes and every financial record.

    Settlement defaults:
    - base_currency is copied verbatim onto invoices and payments
    - tax_included_default seeds Cart.tax_included for new carts
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)

    base_currency = models.CharField(
        max_length=3,
        default="COP",
        help_text="ISO 4217 code used on invoices and payments.",
    )

    tax_included_default = models.BooleanField(
        default=False,
        help_text="When true, catalog prices already contain tax.",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
