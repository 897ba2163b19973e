from decimal import Decimal

from django.test import SimpleTestCase, TestCase

from pos.models import Cart
from pos.services.cart_lifecycle import (
    TERMINAL_STATES,
    can_transition,
    check_completion_guard,
    check_hold_with_debt_guard,
)
from pos.services.cart_store import activate_cart, hold_cart
from pos.services.exceptions import GuardViolation, InvalidCartTransitionError
from pos.tests.base import POSFixturesMixin
from products.models import Product


class CartTransitionRuleTests(SimpleTestCase):
    """
    Pure transition table checks.

    GUARANTEES:
    - Terminal states never transition
    - Only the documented edges exist
    """

    def test_allowed_edges(self):
        self.assertTrue(can_transition(from_status=Cart.STATUS_ACTIVE, to_status=Cart.STATUS_HOLD))
        self.assertTrue(can_transition(from_status=Cart.STATUS_HOLD, to_status=Cart.STATUS_ACTIVE))
        self.assertTrue(can_transition(from_status=Cart.STATUS_ACTIVE, to_status=Cart.STATUS_HOLD_WITH_DEBT))
        self.assertTrue(can_transition(from_status=Cart.STATUS_ACTIVE, to_status=Cart.STATUS_COMPLETED))
        self.assertTrue(can_transition(from_status=Cart.STATUS_HOLD_WITH_DEBT, to_status=Cart.STATUS_CANCELLED))

    def test_hold_cannot_complete_directly(self):
        self.assertFalse(can_transition(from_status=Cart.STATUS_HOLD, to_status=Cart.STATUS_COMPLETED))

    def test_hold_with_debt_cannot_reactivate(self):
        self.assertFalse(can_transition(from_status=Cart.STATUS_HOLD_WITH_DEBT, to_status=Cart.STATUS_ACTIVE))

    def test_terminal_states_are_final(self):
        for terminal in TERMINAL_STATES:
            for target, _label in Cart.STATUS_CHOICES:
                self.assertFalse(
                    can_transition(from_status=terminal, to_status=target),
                    f"{terminal} -> {target} must be rejected",
                )

    def test_completion_guard(self):
        check_completion_guard(total=Decimal("5000.00"), total_paid=Decimal("5000.00"))

        with self.assertRaises(GuardViolation):
            check_completion_guard(total=Decimal("5000.00"), total_paid=Decimal("4999.99"))


class CartLifecycleTests(POSFixturesMixin, TestCase):
    """
    Hold / activate and the hold-with-debt preconditions.
    """

    # =====================================================
    # HOLD / ACTIVATE
    # =====================================================

    def test_hold_then_activate(self):
        cart = self.cart_with()

        held = hold_cart(scope=self.scope, cart_id=cart.id, reason="Customer went to ATM")
        self.assertEqual(held.status, Cart.STATUS_HOLD)
        self.assertEqual(held.hold_reason, "Customer went to ATM")

        resumed = activate_cart(scope=self.scope, cart_id=cart.id)
        self.assertEqual(resumed.status, Cart.STATUS_ACTIVE)

    def test_held_cart_rejects_mutations(self):
        cart = self.cart_with()
        hold_cart(scope=self.scope, cart_id=cart.id, reason="")

        with self.assertRaises(GuardViolation):
            self.mutate(cart, type="add_item", product_id=str(self.other_product.id), quantity=1)

    def test_activate_requires_hold(self):
        cart = self.cart_with()

        with self.assertRaises(InvalidCartTransitionError):
            activate_cart(scope=self.scope, cart_id=cart.id)

    def test_activate_recomputes_with_current_tax_rates(self):
        cart = self.cart_with()
        cart = self.mutate(cart, type="set_applied_taxes", tax_ids=[str(self.vat.id)])
        self.assertEqual(cart.tax_total, Decimal("750.00"))

        hold_cart(scope=self.scope, cart_id=cart.id, reason="")

        self.vat.rate = Decimal("10.0000")
        self.vat.save()

        resumed = activate_cart(scope=self.scope, cart_id=cart.id)
        self.assertEqual(resumed.tax_total, Decimal("500.00"))
        self.assertEqual(resumed.total, Decimal("5500.00"))

    # =====================================================
    # HOLD WITH DEBT GUARD (reported in order)
    # =====================================================

    def test_guard_rejects_non_active_cart(self):
        cart = self.cart_with(customer=self.customer)
        cart = hold_cart(scope=self.scope, cart_id=cart.id, reason="")

        with self.assertRaisesMessage(GuardViolation, "Only active carts"):
            check_hold_with_debt_guard(cart)

    def test_guard_requires_customer_before_items(self):
        cart = self.new_cart()

        with self.assertRaisesMessage(GuardViolation, "customer is required"):
            check_hold_with_debt_guard(cart)

    def test_guard_rejects_empty_cart(self):
        cart = self.new_cart()
        cart = self.mutate(cart, type="set_customer", customer_id=str(self.customer.id))

        with self.assertRaisesMessage(GuardViolation, "empty cart"):
            check_hold_with_debt_guard(cart)

    def test_guard_rejects_zero_total(self):
        freebie = Product.objects.create(
            organization=self.organization,
            sku="SKU-FREE",
            name="Sample",
            unit_price=Decimal("0.00"),
        )
        cart = self.cart_with(product=freebie, customer=self.customer)

        with self.assertRaisesMessage(GuardViolation, "greater than zero"):
            check_hold_with_debt_guard(cart)

    def test_guard_passes_for_valid_cart(self):
        cart = self.cart_with(customer=self.customer)
        check_hold_with_debt_guard(cart)
