# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from organizations.models import Organization


class Product(models.Model):
    """
    Represents a sellable product.

    PRICING MODEL:
    - unit_price is the catalog selling price
    - whether it already contains tax is decided per cart (tax_included),
      never per product
    - the cart snapshots unit_price when the product is added
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization,
        on_delete=models.PROTECT,
        related_name="products",
    )

    sku = models.CharField(max_length=128, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True)

    unit_price = models.DecimalField(max_digits=14, decimal_places=2)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "sku"],
                name="uniq_product_sku_per_org",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.unit_price is None or Decimal(self.unit_price) < 0:
            raise ValidationError("Unit price cannot be negative")
