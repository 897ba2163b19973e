# sales/models/sale_item.py

import uuid
from decimal import Decimal

from django.db import models

from products.models import Product

from .sale import Sale


class SaleItem(models.Model):
    """
    Line item of a Sale: a frozen copy of the cart line.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="sale_items",
    )

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=20, decimal_places=6, default=Decimal("0"))
    tax_rate = models.DecimalField(max_digits=9, decimal_places=4, default=Decimal("0"))
    tax_amount = models.DecimalField(max_digits=20, decimal_places=6, default=Decimal("0"))
    total = models.DecimalField(max_digits=20, decimal_places=6, default=Decimal("0"))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.product} x {self.quantity}"
