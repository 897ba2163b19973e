"""
======================================================
PATH: taxes/services/tax_resolver.py
======================================================
TAX RESOLVER (pure)

Purpose:
- Compute per-line and per-cart tax from supplied tax sources.
- No ORM access: callers pass the organization taxes and an override lookup.

Rules:
- base = quantity * unit_price (before discount)
- Effective tax set = product override set if non-empty, else the
  organization taxes flagged as applied
- tax_included:  tax_r = base * r / (100 + r)   (extracted from base)
- tax added:     tax_r = base * r / 100         (added on top)
- Taxes are independent on the same base (never compounded)
- Line total = base (included) or base + line tax (added), minus discount
- Line values keep 6 decimal places; cart aggregates are rounded to 2
- An override lookup failure degrades that single line to zero tax
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, Optional, Sequence

logger = logging.getLogger(__name__)

LINE_PLACES = Decimal("0.000001")
TWOPLACES = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")


def _dec(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value or "0"))


def _line(value: Decimal) -> Decimal:
    return value.quantize(LINE_PLACES, rounding=ROUND_HALF_UP)


def _money(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


# =====================================================
# INPUT / OUTPUT TYPES
# =====================================================

@dataclass(frozen=True)
class TaxRate:
    id: object
    name: str
    rate: Decimal
    applied: bool = True


@dataclass(frozen=True)
class TaxLineInput:
    product_id: object
    quantity: Decimal
    unit_price: Decimal
    discount_amount: Decimal = ZERO


@dataclass(frozen=True)
class LineTaxResult:
    product_id: object
    base: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    tax_rate: Decimal
    total: Decimal
    taxes: tuple = field(default_factory=tuple)
    degraded: bool = False


@dataclass(frozen=True)
class CartTaxResult:
    lines: tuple
    subtotal: Decimal
    tax_total: Decimal
    discount_total: Decimal
    total: Decimal

    @property
    def degraded_product_ids(self) -> list:
        return [line.product_id for line in self.lines if line.degraded]


OverrideLookup = Callable[[object], Sequence[TaxRate]]


# =====================================================
# LINE
# =====================================================

def tax_amount_for_rate(base: Decimal, rate: Decimal, *, tax_included: bool) -> Decimal:
    if rate <= ZERO:
        return ZERO
    if tax_included:
        return base * rate / (HUNDRED + rate)
    return base * rate / HUNDRED


def calculate_line_tax(
    line: TaxLineInput,
    *,
    tax_included: bool,
    organization_taxes: Iterable[TaxRate],
    get_overrides: Optional[OverrideLookup] = None,
) -> LineTaxResult:
    quantity = _dec(line.quantity)
    unit_price = _dec(line.unit_price)
    discount = _dec(line.discount_amount)
    base = quantity * unit_price

    degraded = False
    overrides: Sequence[TaxRate] = ()
    if get_overrides is not None:
        try:
            overrides = get_overrides(line.product_id) or ()
        except Exception as exc:
            logger.warning(
                "Tax override lookup failed; line degraded to zero tax",
                extra={"product_id": str(line.product_id), "error": str(exc)},
            )
            degraded = True

    if degraded:
        effective: tuple = ()
    elif overrides:
        effective = tuple(overrides)
    else:
        effective = tuple(t for t in organization_taxes if t.applied)

    tax_amount = ZERO
    tax_rate = ZERO
    for tax in effective:
        rate = _dec(tax.rate)
        tax_amount += tax_amount_for_rate(base, rate, tax_included=tax_included)
        tax_rate += rate

    gross = base if tax_included else base + tax_amount

    return LineTaxResult(
        product_id=line.product_id,
        base=_line(base),
        discount_amount=_line(discount),
        tax_amount=_line(tax_amount),
        tax_rate=tax_rate,
        total=_line(gross - discount),
        taxes=effective,
        degraded=degraded,
    )


# =====================================================
# CART
# =====================================================

def calculate_cart_taxes(
    lines: Iterable[TaxLineInput],
    *,
    tax_included: bool,
    organization_taxes: Iterable[TaxRate],
    get_overrides: Optional[OverrideLookup] = None,
) -> CartTaxResult:
    """
    Resolve every line, then aggregate.

    Aggregates are summed at line precision and rounded once:
    total = subtotal + tax_total - discount_total (tax added) or
    total = subtotal - discount_total (tax included).
    """
    org_taxes = list(organization_taxes)

    results = tuple(
        calculate_line_tax(
            line,
            tax_included=tax_included,
            organization_taxes=org_taxes,
            get_overrides=get_overrides,
        )
        for line in lines
    )

    subtotal = _money(sum((r.base for r in results), ZERO))
    tax_total = _money(sum((r.tax_amount for r in results), ZERO))
    discount_total = _money(sum((r.discount_amount for r in results), ZERO))

    if tax_included:
        total = subtotal - discount_total
    else:
        total = subtotal + tax_total - discount_total

    return CartTaxResult(
        lines=results,
        subtotal=subtotal,
        tax_total=tax_total,
        discount_total=discount_total,
        total=_money(total),
    )
