# taxes/models/product_tax_override.py

from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product

from .organization_tax import OrganizationTax


class ProductTaxOverride(models.Model):
    """
    Links a product to one tax of its own organization.

    All override rows of a product together form its tax set; when that set
    is non-empty it replaces the cart's applied organization taxes for the
    product's line.
    """

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="tax_overrides",
    )

    tax = models.ForeignKey(
        OrganizationTax,
        on_delete=models.CASCADE,
        related_name="product_overrides",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["product", "tax"],
                name="uniq_product_tax_override",
            ),
        ]

    def __str__(self):
        return f"{self.product} -> {self.tax}"

    def clean(self):
        if (
            self.product_id
            and self.tax_id
            and self.product.organization_id != self.tax.organization_id
        ):
            raise ValidationError("Override tax must belong to the product's organization")
