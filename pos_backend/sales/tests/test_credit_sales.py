from datetime import timedelta
from decimal import Decimal

from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone

from accounting.models import AccountReceivable
from pos.models import Cart
from pos.services.exceptions import (
    ConsistencyTimeout,
    GuardViolation,
    InvalidCartTransitionError,
    InvoiceNotFoundError,
    POSValidationError,
)
from pos.tests.base import POSFixturesMixin
from sales.models import InvoiceItem, Sale, SalesInvoice
from sales.services.credit_note_orchestrator import cancel_debt_with_credit_note
from sales.services.debt_orchestrator import hold_cart_with_debt
from sales.services.invoice_lookup import get_invoice_for_cart, parse_invoice_pointer
from sales.services.numbering import next_invoice_number


class InvoicePointerTests(SimpleTestCase):
    def test_parse_pointer_with_due_date(self):
        number, due = parse_invoice_pointer("Invoice: FACT-000042 | Due: 2026-11-18\nCall first")

        self.assertEqual(number, "FACT-000042")
        self.assertEqual(due.isoformat(), "2026-11-18")

    def test_parse_pointer_without_due_date(self):
        self.assertEqual(parse_invoice_pointer("Invoice: FACT-000007"), ("FACT-000007", None))

    def test_no_pointer(self):
        self.assertIsNone(parse_invoice_pointer("just a note"))


class HoldWithDebtTests(POSFixturesMixin, TestCase):
    """
    Debt pipeline.

    GUARANTEES:
    - Success leaves: pending sale, issued credit invoice, receivable
      (written by the trigger), cart hold_with_debt with invoice pointer
    - Any failure leaves nothing behind and the cart active
    """

    def test_hold_with_debt_creates_credit_documents(self):
        cart = self.cart_with(quantity=2, customer=self.customer)
        cart = self.mutate(cart, type="set_applied_taxes", tax_ids=[str(self.vat.id)])

        result = hold_cart_with_debt(
            scope=self.scope,
            cart_id=cart.id,
            reason="Pays on Friday",
            notes="Call before delivery",
        )

        today = timezone.localdate()
        invoice = result.invoice

        self.assertEqual(invoice.status, SalesInvoice.STATUS_ISSUED)
        self.assertEqual(invoice.payment_method, "credit")
        self.assertEqual(invoice.payment_terms, 30)
        self.assertEqual(invoice.due_date, today + timedelta(days=30))
        self.assertEqual(invoice.total, Decimal("11500.00"))
        self.assertEqual(invoice.balance, Decimal("11500.00"))
        self.assertEqual(invoice.items.count(), 1)

        self.assertEqual(result.sale.status, Sale.STATUS_PENDING)
        self.assertEqual(result.sale.balance, Decimal("11500.00"))
        self.assertEqual(result.sale.items.count(), 1)

        receivable = result.receivable
        self.assertEqual(receivable.invoice_id, invoice.id)
        self.assertEqual(receivable.balance, Decimal("11500.00"))
        self.assertEqual(receivable.status, AccountReceivable.STATUS_PENDING)
        self.assertEqual(receivable.due_date, invoice.due_date)

        cart.refresh_from_db()
        self.assertEqual(cart.status, Cart.STATUS_HOLD_WITH_DEBT)
        self.assertEqual(cart.hold_reason, "Pays on Friday")
        self.assertEqual(
            cart.notes,
            f"Invoice: {invoice.number} | Due: {invoice.due_date.isoformat()}\nCall before delivery",
        )

    def test_custom_payment_terms(self):
        cart = self.cart_with(customer=self.customer)

        result = hold_cart_with_debt(scope=self.scope, cart_id=cart.id, reason="x", payment_terms=7)

        self.assertEqual(result.invoice.due_date, timezone.localdate() + timedelta(days=7))

    def test_reason_is_required(self):
        cart = self.cart_with(customer=self.customer)

        with self.assertRaises(POSValidationError):
            hold_cart_with_debt(scope=self.scope, cart_id=cart.id, reason="  ")

    def test_guard_failure_writes_nothing(self):
        cart = self.cart_with()

        with self.assertRaises(GuardViolation):
            hold_cart_with_debt(scope=self.scope, cart_id=cart.id, reason="x")

        self.assertFalse(Sale.objects.exists())
        self.assertFalse(SalesInvoice.objects.exists())

    @override_settings(POS={"RECEIVABLE_TRIGGER_ENABLED": False, "RECEIVABLE_FETCH_DELAY_SECONDS": 0})
    def test_missing_receivable_times_out_and_rolls_back(self):
        cart = self.cart_with(customer=self.customer)

        with self.assertRaises(ConsistencyTimeout) as ctx:
            hold_cart_with_debt(scope=self.scope, cart_id=cart.id, reason="x")

        self.assertEqual(ctx.exception.step, "fetch_receivable")
        self.assertFalse(Sale.objects.exists())
        self.assertFalse(SalesInvoice.objects.exists())
        self.assertFalse(AccountReceivable.objects.exists())

        cart.refresh_from_db()
        self.assertEqual(cart.status, Cart.STATUS_ACTIVE)
        self.assertEqual(cart.notes, "")

        # the number allocated inside the failed pipeline was rolled back too
        self.assertEqual(next_invoice_number(organization=self.organization), "FACT-000001")

    def test_invoice_lookup(self):
        cart = self.cart_with(customer=self.customer)
        result = hold_cart_with_debt(scope=self.scope, cart_id=cart.id, reason="x")

        lookup = get_invoice_for_cart(scope=self.scope, cart_id=cart.id)

        self.assertEqual(lookup.invoice.id, result.invoice.id)
        self.assertEqual(lookup.customer, self.customer)
        self.assertEqual(len(lookup.items), 1)
        self.assertEqual(lookup.payments, [])

    def test_invoice_lookup_without_pointer(self):
        cart = self.cart_with()

        with self.assertRaises(InvoiceNotFoundError):
            get_invoice_for_cart(scope=self.scope, cart_id=cart.id)


class CreditNoteTests(POSFixturesMixin, TestCase):
    """
    Reversal pipeline.

    GUARANTEES:
    - credit_note.total == -invoice.total, lines negated
    - invoice, sale and receivable balances end at zero
    - cart ends cancelled (terminal)
    """

    def setUp(self):
        super().setUp()
        cart = self.cart_with(quantity=2, customer=self.customer)
        item = cart.items.get()
        self.mutate(cart, type="set_item_discount", item_id=str(item.id), amount="1000")
        self.debt = hold_cart_with_debt(scope=self.scope, cart_id=cart.id, reason="Pays later")
        self.cart = self.debt.cart

    def test_credit_note_negates_invoice(self):
        result = cancel_debt_with_credit_note(scope=self.scope, cart_id=self.cart.id, reason="Goods returned")

        note = result.credit_note
        invoice = self.debt.invoice

        self.assertEqual(note.document_type, SalesInvoice.DOCUMENT_CREDIT_NOTE)
        self.assertEqual(note.number, "NC-000001")
        self.assertEqual(note.related_invoice_id, invoice.id)
        self.assertEqual(note.total, -invoice.total)
        self.assertEqual(note.subtotal, -invoice.subtotal)
        self.assertEqual(note.discount_total, Decimal("-1000.00"))
        self.assertEqual(note.balance, Decimal("0.00"))

        line = InvoiceItem.objects.get(invoice=note)
        self.assertEqual(line.qty, -2)
        self.assertEqual(line.total_line, Decimal("-9000"))
        self.assertEqual(line.discount_amount, Decimal("-1000"))

    def test_balances_are_zeroed(self):
        cancel_debt_with_credit_note(scope=self.scope, cart_id=self.cart.id)

        invoice = SalesInvoice.objects.get(id=self.debt.invoice.id)
        sale = Sale.objects.get(id=self.debt.sale.id)
        receivable = AccountReceivable.objects.get(invoice=invoice)

        self.assertEqual(invoice.balance, Decimal("0.00"))
        self.assertEqual(invoice.status, SalesInvoice.STATUS_PAID)
        self.assertEqual(sale.balance, Decimal("0.00"))
        self.assertEqual(sale.status, Sale.STATUS_PAID)
        self.assertEqual(receivable.balance, Decimal("0.00"))
        self.assertEqual(receivable.status, AccountReceivable.STATUS_PAID)

    def test_cart_is_cancelled_and_terminal(self):
        result = cancel_debt_with_credit_note(scope=self.scope, cart_id=self.cart.id)

        cart = Cart.objects.get(id=self.cart.id)
        self.assertEqual(cart.status, Cart.STATUS_CANCELLED)
        self.assertIn(f"Credit note: {result.credit_note.number}", cart.notes)

        with self.assertRaises(InvalidCartTransitionError):
            cancel_debt_with_credit_note(scope=self.scope, cart_id=self.cart.id)

    def test_credit_note_does_not_open_receivable(self):
        cancel_debt_with_credit_note(scope=self.scope, cart_id=self.cart.id)

        self.assertEqual(AccountReceivable.objects.count(), 1)

    def test_falls_back_to_latest_pending_sale_of_customer(self):
        Sale.objects.filter(id=self.debt.sale.id).update(source_cart=None)

        result = cancel_debt_with_credit_note(scope=self.scope, cart_id=self.cart.id)

        self.assertEqual(result.sale.id, self.debt.sale.id)

    def test_missing_receivable_does_not_block_reversal(self):
        AccountReceivable.objects.filter(invoice=self.debt.invoice).delete()

        result = cancel_debt_with_credit_note(scope=self.scope, cart_id=self.cart.id)

        self.assertIsNone(result.receivable)
        self.assertEqual(result.cart.status, Cart.STATUS_CANCELLED)

    def test_active_cart_cannot_be_reversed(self):
        cart = self.cart_with()

        with self.assertRaises(InvalidCartTransitionError):
            cancel_debt_with_credit_note(scope=self.scope, cart_id=cart.id)
