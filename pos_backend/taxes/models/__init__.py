# taxes/models/__init__.py

from .organization_tax import OrganizationTax
from .product_tax_override import ProductTaxOverride

__all__ = ["OrganizationTax", "ProductTaxOverride"]
