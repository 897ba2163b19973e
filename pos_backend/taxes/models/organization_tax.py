# taxes/models/organization_tax.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from organizations.models import Organization


class OrganizationTax(models.Model):
    """
    A tax rate defined by an organization (e.g. "IVA 19%").

    - rate is a percentage (19.00 means 19%)
    - is_default taxes are applied to new carts unless a product override exists
    - inactive taxes are ignored everywhere
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="taxes",
    )

    name = models.CharField(max_length=100)
    rate = models.DecimalField(max_digits=7, decimal_places=4)

    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.rate}%)"

    def clean(self):
        if self.rate is None or Decimal(self.rate) < 0:
            raise ValidationError({"rate": "Tax rate cannot be negative"})
