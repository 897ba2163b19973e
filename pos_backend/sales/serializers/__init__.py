from .documents import (
    InvoiceItemSerializer,
    PaymentSerializer,
    SaleSerializer,
    SalesInvoiceSerializer,
)

__all__ = [
    "InvoiceItemSerializer",
    "PaymentSerializer",
    "SaleSerializer",
    "SalesInvoiceSerializer",
]
