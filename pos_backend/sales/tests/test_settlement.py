from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase

from accounting.models import AccountReceivable
from pos.models import Cart
from pos.services.cart_store import hold_cart
from pos.services.exceptions import (
    DependencyFailure,
    GuardViolation,
    InvalidCartTransitionError,
    PaymentValidationError,
)
from pos.tests.base import POSFixturesMixin
from sales.models import InvoiceItem, Payment, Sale, SaleItem, SalesInvoice
from sales.services.checkout_orchestrator import normalize_payments, settle


class NormalizePaymentsTests(SimpleTestCase):
    """
    Payment entry validation (no database writes).
    """

    def test_zero_amount_entries_are_dropped(self):
        entries = normalize_payments(
            [{"method": "cash", "amount": "0"}, {"method": "cash", "amount": "100"}],
            total=Decimal("100.00"),
        )

        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].amount, Decimal("100.00"))

    def test_negative_amount_rejected(self):
        with self.assertRaises(PaymentValidationError):
            normalize_payments([{"method": "cash", "amount": "-5"}], total=Decimal("100.00"))

    def test_unknown_method_rejected(self):
        with self.assertRaises(PaymentValidationError):
            normalize_payments([{"method": "bitcoin", "amount": "5"}], total=Decimal("100.00"))

    def test_reference_required_for_non_cash(self):
        for method in ("card", "transfer", "bank"):
            with self.assertRaises(PaymentValidationError):
                normalize_payments([{"method": method, "amount": "5"}], total=Decimal("100.00"))

    def test_only_cash_may_exceed_remaining(self):
        normalize_payments([{"method": "cash", "amount": "150"}], total=Decimal("100.00"))

        with self.assertRaisesMessage(PaymentValidationError, "exceeds remaining balance"):
            normalize_payments(
                [
                    {"method": "cash", "amount": "60"},
                    {"method": "card", "amount": "50", "reference": "AUTH-1"},
                ],
                total=Decimal("100.00"),
            )


class SettlementTests(POSFixturesMixin, TestCase):
    """
    Checkout pipeline.

    GUARANTEES:
    - Exact and over payment complete the cart with change = paid - total
    - Underpayment is rejected unless allow_partial
    - A partial checkout with a customer opens a receivable for the remainder
    - Required step failures roll everything back; best-effort ones degrade
    """

    # =====================================================
    # HAPPY PATHS
    # =====================================================

    def test_exact_cash_payment(self):
        cart = self.cart_with()

        result = settle(scope=self.scope, cart_id=cart.id, payments=[{"method": "cash", "amount": "5000"}])

        self.assertEqual(result.total_paid, Decimal("5000.00"))
        self.assertEqual(result.change, Decimal("0.00"))
        self.assertEqual(result.remaining, Decimal("0.00"))

        self.assertEqual(result.sale.status, Sale.STATUS_PAID)
        self.assertEqual(result.sale.payment_status, Sale.PAYMENT_PAID)
        self.assertEqual(result.sale.total, Decimal("5000.00"))
        self.assertEqual(result.invoice.status, SalesInvoice.STATUS_PAID)
        self.assertEqual(result.invoice.payment_method, "cash")
        self.assertEqual(result.invoice.currency, "COP")
        self.assertTrue(result.invoice.number.startswith("FACT-"))
        self.assertEqual(result.degraded_steps, [])

        cart.refresh_from_db()
        self.assertEqual(cart.status, Cart.STATUS_COMPLETED)

    def test_cash_overpayment_returns_change(self):
        cart = self.cart_with()

        result = settle(scope=self.scope, cart_id=cart.id, payments=[{"method": "cash", "amount": "7000"}])

        self.assertEqual(result.change, Decimal("2000.00"))
        self.assertEqual(result.remaining, Decimal("0.00"))
        self.assertEqual(result.payments[0].amount, Decimal("7000.00"))

    def test_items_are_mirrored(self):
        cart = self.cart_with(quantity=2)
        cart = self.mutate(cart, type="add_item", product_id=str(self.other_product.id), quantity=1)

        result = settle(scope=self.scope, cart_id=cart.id, payments=[{"method": "cash", "amount": "13000"}])

        self.assertEqual(SaleItem.objects.filter(sale=result.sale).count(), 2)
        lines = InvoiceItem.objects.filter(invoice=result.invoice)
        self.assertEqual(lines.count(), 2)
        self.assertEqual({line.description for line in lines}, {"Coffee 500g", "Sugar 1kg"})

    def test_split_payment_uses_mixed_method(self):
        cart = self.cart_with()

        result = settle(
            scope=self.scope,
            cart_id=cart.id,
            payments=[
                {"method": "card", "amount": "3000", "reference": "AUTH-77"},
                {"method": "cash", "amount": "2000"},
            ],
        )

        self.assertEqual(result.invoice.payment_method, "mixed")
        self.assertEqual(Payment.objects.filter(invoice=result.invoice).count(), 2)

    # =====================================================
    # UNDERPAYMENT
    # =====================================================

    def test_underpayment_rejected_and_nothing_written(self):
        cart = self.cart_with()

        with self.assertRaises(GuardViolation):
            settle(scope=self.scope, cart_id=cart.id, payments=[{"method": "cash", "amount": "4000"}])

        self.assertFalse(Sale.objects.exists())
        cart.refresh_from_db()
        self.assertEqual(cart.status, Cart.STATUS_ACTIVE)

    def test_partial_with_customer_opens_receivable(self):
        cart = self.cart_with(customer=self.customer)

        result = settle(
            scope=self.scope,
            cart_id=cart.id,
            payments=[{"method": "cash", "amount": "2000"}],
            allow_partial=True,
        )

        self.assertEqual(result.remaining, Decimal("3000.00"))
        self.assertEqual(result.sale.status, Sale.STATUS_PENDING)
        self.assertEqual(result.sale.payment_status, Sale.PAYMENT_PARTIAL)
        self.assertEqual(result.invoice.status, SalesInvoice.STATUS_PARTIAL)
        self.assertEqual(result.receivable.amount, result.sale.total)
        self.assertEqual(result.receivable.amount, Decimal("5000.00"))
        self.assertEqual(result.receivable.balance, Decimal("3000.00"))
        self.assertEqual(result.receivable.status, AccountReceivable.STATUS_PARTIAL)
        self.assertEqual(result.receivable.sale_id, result.sale.id)
        self.assertEqual(result.receivable.invoice_id, result.invoice.id)

    def test_partial_without_customer_opens_no_receivable(self):
        cart = self.cart_with()

        result = settle(
            scope=self.scope,
            cart_id=cart.id,
            payments=[{"method": "cash", "amount": "2000"}],
            allow_partial=True,
        )

        self.assertIsNone(result.receivable)
        self.assertFalse(AccountReceivable.objects.exists())

    # =====================================================
    # GUARDS
    # =====================================================

    def test_empty_cart_cannot_be_settled(self):
        cart = self.new_cart()

        with self.assertRaises(GuardViolation):
            settle(scope=self.scope, cart_id=cart.id, payments=[])

    def test_held_cart_cannot_be_settled(self):
        cart = self.cart_with()
        hold_cart(scope=self.scope, cart_id=cart.id, reason="")

        with self.assertRaises(InvalidCartTransitionError):
            settle(scope=self.scope, cart_id=cart.id, payments=[{"method": "cash", "amount": "5000"}])

    def test_completed_cart_is_terminal(self):
        cart = self.cart_with()
        settle(scope=self.scope, cart_id=cart.id, payments=[{"method": "cash", "amount": "5000"}])

        with self.assertRaises(InvalidCartTransitionError):
            settle(scope=self.scope, cart_id=cart.id, payments=[{"method": "cash", "amount": "5000"}])

        with self.assertRaises(GuardViolation):
            self.mutate(cart, type="clear_cart")

    # =====================================================
    # STEP FAILURES
    # =====================================================

    def test_invoice_failure_degrades_and_payments_attach_to_sale(self):
        cart = self.cart_with()

        with mock.patch(
            "sales.services.checkout_orchestrator.next_invoice_number",
            side_effect=DatabaseError("sequence unavailable"),
        ):
            result = settle(scope=self.scope, cart_id=cart.id, payments=[{"method": "cash", "amount": "5000"}])

        self.assertIsNone(result.invoice)
        self.assertIn("create_invoice", result.degraded_steps)
        self.assertIn("create_invoice_items", result.degraded_steps)
        self.assertFalse(SalesInvoice.objects.exists())

        payment = result.payments[0]
        self.assertEqual(payment.source.kind, Payment.SOURCE_SALE)
        self.assertEqual(payment.sale_id, result.sale.id)

        cart.refresh_from_db()
        self.assertEqual(cart.status, Cart.STATUS_COMPLETED)

    def test_invoice_failure_still_opens_receivable_against_sale(self):
        cart = self.cart_with(customer=self.customer)

        with mock.patch(
            "sales.services.checkout_orchestrator.next_invoice_number",
            side_effect=DatabaseError("sequence unavailable"),
        ):
            result = settle(
                scope=self.scope,
                cart_id=cart.id,
                payments=[{"method": "cash", "amount": "3000"}],
                allow_partial=True,
            )

        self.assertIsNone(result.invoice)
        self.assertIn("create_invoice", result.degraded_steps)
        self.assertNotIn("open_receivable", result.degraded_steps)

        receivable = AccountReceivable.objects.get(sale=result.sale)
        self.assertIsNone(receivable.invoice_id)
        self.assertEqual(receivable.customer_id, self.customer.id)
        self.assertEqual(receivable.amount, Decimal("5000.00"))
        self.assertEqual(receivable.balance, Decimal("2000.00"))
        self.assertEqual(result.receivable.id, receivable.id)

    def test_receivable_failure_rolls_back_checkout(self):
        cart = self.cart_with(customer=self.customer)

        with mock.patch(
            "sales.services.checkout_orchestrator.open_settlement_receivable",
            side_effect=DatabaseError("ledger locked"),
        ):
            with self.assertRaises(DependencyFailure) as ctx:
                settle(
                    scope=self.scope,
                    cart_id=cart.id,
                    payments=[{"method": "cash", "amount": "3000"}],
                    allow_partial=True,
                )

        self.assertEqual(ctx.exception.step, "open_receivable")
        self.assertFalse(Sale.objects.exists())
        self.assertFalse(Payment.objects.exists())
        self.assertFalse(AccountReceivable.objects.exists())
        cart.refresh_from_db()
        self.assertEqual(cart.status, Cart.STATUS_ACTIVE)

    def test_required_step_failure_rolls_back(self):
        cart = self.cart_with()

        with mock.patch(
            "sales.services.checkout_orchestrator.create_sale_items",
            side_effect=DatabaseError("disk full"),
        ):
            with self.assertRaises(DependencyFailure) as ctx:
                settle(scope=self.scope, cart_id=cart.id, payments=[{"method": "cash", "amount": "5000"}])

        self.assertEqual(ctx.exception.step, "create_sale_items")
        self.assertFalse(Sale.objects.exists())

        cart.refresh_from_db()
        self.assertEqual(cart.status, Cart.STATUS_ACTIVE)
