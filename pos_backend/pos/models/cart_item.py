# pos/models/cart_item.py

"""
CART ITEM MODEL

Purpose:
- Store POS cart line items.
- Unit price is a snapshot at time of add (server-controlled).
- tax_amount, tax_rate and total are computed by the tax resolver and keep
  6 decimal places.

Rules:
- One product per cart (DB constraint).
- Quantity must be > 0.
- Discount must be >= 0 and not exceed quantity * unit_price.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product

from .cart import Cart


class CartItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    cart = models.ForeignKey(
        Cart,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="cart_items",
    )

    quantity = models.PositiveIntegerField(help_text="Must be greater than zero")

    unit_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Snapshot price at time of adding to cart (server-controlled)",
    )

    discount_amount = models.DecimalField(max_digits=20, decimal_places=6, default=Decimal("0"))
    tax_rate = models.DecimalField(max_digits=9, decimal_places=4, default=Decimal("0"))
    tax_amount = models.DecimalField(max_digits=20, decimal_places=6, default=Decimal("0"))
    total = models.DecimalField(max_digits=20, decimal_places=6, default=Decimal("0"))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["cart", "product"],
                name="unique_product_per_cart",
            )
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) <= 0:
            raise ValidationError({"quantity": "Quantity must be greater than zero"})

        if self.unit_price is None or self.unit_price < 0:
            raise ValidationError({"unit_price": "Unit price cannot be negative"})

        discount = Decimal(self.discount_amount or 0)
        if discount < 0:
            raise ValidationError({"discount_amount": "Discount cannot be negative"})
        if discount > self.base_amount:
            raise ValidationError({"discount_amount": "Discount cannot exceed the line amount"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def base_amount(self) -> Decimal:
        return (self.unit_price or Decimal("0.00")) * Decimal(int(self.quantity or 0))

    def __str__(self):
        return f"{getattr(self.product, 'name', 'Product')} x {self.quantity}"
