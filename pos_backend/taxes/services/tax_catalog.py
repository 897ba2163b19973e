"""
PATH: taxes/services/tax_catalog.py

Tax catalog collaborator: loads organization taxes and product overrides
and converts them into resolver TaxRate values.
"""

from __future__ import annotations

from typing import Iterable

from products.services.catalog import get_product_tax_overrides
from taxes.models import OrganizationTax

from .tax_resolver import TaxRate


def get_organization_taxes(*, organization, active_only: bool = True) -> list[OrganizationTax]:
    qs = OrganizationTax.objects.filter(organization=organization)
    if active_only:
        qs = qs.filter(is_active=True)
    return list(qs.order_by("name"))


def default_tax_ids(*, organization) -> list[str]:
    return [
        str(t.id)
        for t in get_organization_taxes(organization=organization)
        if t.is_default
    ]


def organization_tax_rates(*, organization, applied_ids: Iterable) -> list[TaxRate]:
    applied = {str(x) for x in (applied_ids or [])}
    return [
        TaxRate(id=t.id, name=t.name, rate=t.rate, applied=str(t.id) in applied)
        for t in get_organization_taxes(organization=organization)
    ]


def override_tax_rates(product_id) -> list[TaxRate]:
    return [
        TaxRate(id=t.id, name=t.name, rate=t.rate)
        for t in get_product_tax_overrides(product_id=product_id)
    ]
