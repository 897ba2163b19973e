# organizations/services/currency.py

"""
Base currency lookup. No conversion math lives here: the code is copied
verbatim onto invoices and payments.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Currency:
    code: str


def get_base_currency(organization) -> Currency:
    code = (getattr(organization, "base_currency", "") or "").strip().upper()
    return Currency(code=code or "COP")
