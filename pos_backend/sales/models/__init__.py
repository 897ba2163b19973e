# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .document_sequence import DocumentSequence
from .invoice import InvoiceItem, SalesInvoice
from .payment import Payment, PaymentSource
from .sale import Sale
from .sale_item import SaleItem

__all__ = [
    "DocumentSequence",
    "InvoiceItem",
    "Payment",
    "PaymentSource",
    "Sale",
    "SaleItem",
    "SalesInvoice",
]
