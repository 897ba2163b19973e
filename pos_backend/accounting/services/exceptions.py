# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class ReceivableNotFound(AccountingServiceError):
    """Raised when no receivable exists (yet) for an invoice."""
