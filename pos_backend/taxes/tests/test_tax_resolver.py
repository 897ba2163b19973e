# taxes/tests/test_tax_resolver.py

from decimal import Decimal

from django.test import SimpleTestCase

from taxes.services.tax_resolver import (
    TaxLineInput,
    TaxRate,
    calculate_cart_taxes,
    calculate_line_tax,
)

IVA_15 = TaxRate(id="iva15", name="IVA 15", rate=Decimal("15"))
IVA_19 = TaxRate(id="iva19", name="IVA 19", rate=Decimal("19"))
CONSUMO_8 = TaxRate(id="ico8", name="Consumo 8", rate=Decimal("8"))


class TaxResolverLineTests(SimpleTestCase):
    """
    Line-level tax resolution.

    GUARANTEES:
    - Inclusive prices have tax extracted, exclusive prices have tax added
    - Product overrides replace organization taxes (never added to them)
    - Multiple taxes apply to the same base (no compounding)
    """

    def test_tax_included_extracts_tax_from_price(self):
        line = TaxLineInput(product_id="p1", quantity=1, unit_price=Decimal("11500"))

        result = calculate_line_tax(line, tax_included=True, organization_taxes=[IVA_15])

        self.assertEqual(result.tax_amount, Decimal("1500.000000"))
        self.assertEqual(result.base, Decimal("11500.000000"))
        self.assertEqual(result.total, Decimal("11500.000000"))

    def test_tax_added_on_top_of_price(self):
        line = TaxLineInput(product_id="p1", quantity=1, unit_price=Decimal("11500"))

        result = calculate_line_tax(line, tax_included=False, organization_taxes=[IVA_15])

        self.assertEqual(result.tax_amount, Decimal("1725.000000"))
        self.assertEqual(result.total, Decimal("13225.000000"))

    def test_unapplied_organization_tax_is_ignored(self):
        unapplied = TaxRate(id="iva19", name="IVA 19", rate=Decimal("19"), applied=False)
        line = TaxLineInput(product_id="p1", quantity=2, unit_price=Decimal("100"))

        result = calculate_line_tax(line, tax_included=False, organization_taxes=[unapplied])

        self.assertEqual(result.tax_amount, Decimal("0"))
        self.assertEqual(result.total, Decimal("200.000000"))

    def test_override_replaces_organization_taxes(self):
        line = TaxLineInput(product_id="p1", quantity=1, unit_price=Decimal("100"))

        result = calculate_line_tax(
            line,
            tax_included=False,
            organization_taxes=[IVA_19],
            get_overrides=lambda product_id: [CONSUMO_8],
        )

        self.assertEqual(result.tax_amount, Decimal("8.000000"))
        self.assertEqual(result.tax_rate, Decimal("8"))
        self.assertEqual([t.id for t in result.taxes], ["ico8"])

    def test_empty_override_falls_back_to_organization_taxes(self):
        line = TaxLineInput(product_id="p1", quantity=1, unit_price=Decimal("100"))

        result = calculate_line_tax(
            line,
            tax_included=False,
            organization_taxes=[IVA_19],
            get_overrides=lambda product_id: [],
        )

        self.assertEqual(result.tax_amount, Decimal("19.000000"))

    def test_taxes_are_not_compounded(self):
        line = TaxLineInput(product_id="p1", quantity=1, unit_price=Decimal("100"))

        result = calculate_line_tax(
            line, tax_included=False, organization_taxes=[IVA_19, CONSUMO_8]
        )

        # 19 + 8 on the same base, not 8% of (100 + 19)
        self.assertEqual(result.tax_amount, Decimal("27.000000"))
        self.assertEqual(result.tax_rate, Decimal("27"))

    def test_override_lookup_failure_degrades_line_to_zero_tax(self):
        def broken(product_id):
            raise RuntimeError("catalog unavailable")

        line = TaxLineInput(product_id="p1", quantity=1, unit_price=Decimal("100"))

        with self.assertLogs("taxes.services.tax_resolver", level="WARNING"):
            result = calculate_line_tax(
                line,
                tax_included=False,
                organization_taxes=[IVA_19],
                get_overrides=broken,
            )

        self.assertTrue(result.degraded)
        self.assertEqual(result.tax_amount, Decimal("0"))
        self.assertEqual(result.total, Decimal("100.000000"))

    def test_discount_is_subtracted_after_tax(self):
        line = TaxLineInput(
            product_id="p1",
            quantity=2,
            unit_price=Decimal("50"),
            discount_amount=Decimal("10"),
        )

        result = calculate_line_tax(line, tax_included=False, organization_taxes=[IVA_19])

        self.assertEqual(result.tax_amount, Decimal("19.000000"))
        self.assertEqual(result.total, Decimal("109.000000"))


class TaxResolverCartTests(SimpleTestCase):
    """
    Cart aggregation: full precision per line, rounding only on totals.
    """

    def test_cart_totals_are_rounded_once(self):
        lines = [
            TaxLineInput(product_id="a", quantity=1, unit_price=Decimal("0.10")),
            TaxLineInput(product_id="b", quantity=1, unit_price=Decimal("0.10")),
            TaxLineInput(product_id="c", quantity=1, unit_price=Decimal("0.10")),
        ]

        result = calculate_cart_taxes(lines, tax_included=False, organization_taxes=[IVA_15])

        # each line carries 0.015; rounding per line would give 0.06
        self.assertEqual(result.tax_total, Decimal("0.05"))
        self.assertEqual(result.subtotal, Decimal("0.30"))
        self.assertEqual(result.total, Decimal("0.35"))

    def test_one_failing_override_does_not_fail_the_cart(self):
        def lookup(product_id):
            if product_id == "bad":
                raise RuntimeError("timeout")
            return []

        lines = [
            TaxLineInput(product_id="good", quantity=1, unit_price=Decimal("100")),
            TaxLineInput(product_id="bad", quantity=1, unit_price=Decimal("100")),
        ]

        with self.assertLogs("taxes.services.tax_resolver", level="WARNING"):
            result = calculate_cart_taxes(
                lines,
                tax_included=False,
                organization_taxes=[IVA_19],
                get_overrides=lookup,
            )

        self.assertEqual(result.tax_total, Decimal("19.00"))
        self.assertEqual(result.total, Decimal("219.00"))
        self.assertEqual(result.degraded_product_ids, ["bad"])

    def test_additive_invariant_for_tax_added_carts(self):
        lines = [
            TaxLineInput(product_id="a", quantity=3, unit_price=Decimal("33.33"), discount_amount=Decimal("5")),
            TaxLineInput(product_id="b", quantity=1, unit_price=Decimal("12.50")),
        ]

        result = calculate_cart_taxes(lines, tax_included=False, organization_taxes=[IVA_19])

        self.assertEqual(
            result.total,
            result.subtotal + result.tax_total - result.discount_total,
        )

    def test_tax_included_cart_total_equals_subtotal_minus_discount(self):
        lines = [
            TaxLineInput(product_id="a", quantity=1, unit_price=Decimal("11500"), discount_amount=Decimal("500")),
        ]

        result = calculate_cart_taxes(lines, tax_included=True, organization_taxes=[IVA_15])

        self.assertEqual(result.tax_total, Decimal("1500.00"))
        self.assertEqual(result.total, Decimal("11000.00"))
