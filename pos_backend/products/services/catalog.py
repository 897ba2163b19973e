"""
PATH: products/services/catalog.py

CATALOG LOOKUPS USED BY THE POS

Purpose:
- Narrow read interface over products for the cart and settlement code.
- get_product() returns the sellable product of one organization.
- get_product_tax_overrides() returns the tax set that fully replaces the
  organization default taxes for one product (empty list = no override).

Rules:
- Lookups are organization-scoped; a product from another tenant is "not found".
- Only active taxes count as overrides.
"""

from __future__ import annotations

from django.core.exceptions import ObjectDoesNotExist

from products.models import Product
from taxes.models import OrganizationTax


class ProductNotFound(ObjectDoesNotExist):
    pass


def get_product(*, organization, product_id, active_only: bool = True) -> Product:
    qs = Product.objects.filter(organization=organization, id=product_id)
    if active_only:
        qs = qs.filter(is_active=True)

    product = qs.first()
    if product is None:
        raise ProductNotFound(f"Product {product_id} not found")
    return product


def get_product_tax_overrides(*, product_id) -> list[OrganizationTax]:
    return list(
        OrganizationTax.objects.filter(
            product_overrides__product_id=product_id,
            is_active=True,
        ).order_by("name")
    )
