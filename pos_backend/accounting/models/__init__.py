# accounting/models/__init__.py

from .receivable import AccountReceivable

__all__ = ["AccountReceivable"]
