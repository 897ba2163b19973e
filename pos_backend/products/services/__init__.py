from .catalog import get_product, get_product_tax_overrides

__all__ = [
    "get_product",
    "get_product_tax_overrides",
]
