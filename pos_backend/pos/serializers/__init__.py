from .cart import CartSerializer
from .cart_item import CartItemSerializer
from .inputs import (
    CancelDebtInputSerializer,
    CartListQuerySerializer,
    CheckoutInputSerializer,
    HoldCartInputSerializer,
    HoldWithDebtInputSerializer,
    MutateCartInputSerializer,
    PaymentEntryInputSerializer,
)

__all__ = [
    "CancelDebtInputSerializer",
    "CartItemSerializer",
    "CartListQuerySerializer",
    "CartSerializer",
    "CheckoutInputSerializer",
    "HoldCartInputSerializer",
    "HoldWithDebtInputSerializer",
    "MutateCartInputSerializer",
    "PaymentEntryInputSerializer",
]
