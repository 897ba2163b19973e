"""
PATH: sales/services/documents.py

Line mirroring shared by the settlement and debt pipelines:
cart lines -> SaleItem rows and cart lines -> InvoiceItem rows.
"""

from __future__ import annotations

import logging

from products.services.catalog import ProductNotFound, get_product
from sales.models import InvoiceItem, SaleItem

logger = logging.getLogger(__name__)

GENERIC_DESCRIPTION = "Item"


def product_description(*, organization, product_id) -> str:
    try:
        product = get_product(organization=organization, product_id=product_id, active_only=False)
    except ProductNotFound:
        logger.warning(
            "Product description lookup failed; using generic description",
            extra={"product_id": str(product_id)},
        )
        return GENERIC_DESCRIPTION

    text = (product.description or product.name or "").strip()
    return (text or GENERIC_DESCRIPTION)[:500]


def create_sale_items(*, sale, cart_items) -> list[SaleItem]:
    return [
        SaleItem.objects.create(
            sale=sale,
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            discount_amount=item.discount_amount,
            tax_rate=item.tax_rate,
            tax_amount=item.tax_amount,
            total=item.total,
        )
        for item in cart_items
    ]


def create_invoice_items(*, invoice, cart_items) -> list[InvoiceItem]:
    return [
        InvoiceItem.objects.create(
            invoice=invoice,
            product_id=item.product_id,
            description=product_description(
                organization=invoice.organization,
                product_id=item.product_id,
            ),
            qty=item.quantity,
            unit_price=item.unit_price,
            tax_rate=item.tax_rate,
            tax_amount=item.tax_amount,
            discount_amount=item.discount_amount,
            total_line=item.total,
            tax_included=invoice.tax_included,
        )
        for item in cart_items
    ]
