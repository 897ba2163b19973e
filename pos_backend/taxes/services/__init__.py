from .tax_catalog import get_organization_taxes, organization_tax_rates, override_tax_rates
from .tax_resolver import (
    CartTaxResult,
    LineTaxResult,
    TaxLineInput,
    TaxRate,
    calculate_cart_taxes,
    calculate_line_tax,
)

__all__ = [
    "CartTaxResult",
    "LineTaxResult",
    "TaxLineInput",
    "TaxRate",
    "calculate_cart_taxes",
    "calculate_line_tax",
    "get_organization_taxes",
    "organization_tax_rates",
    "override_tax_rates",
]
