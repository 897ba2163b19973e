from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings
from django.utils import timezone

from accounting.models import AccountReceivable
from accounting.services.exceptions import ReceivableNotFound
from accounting.services.receivable_service import (
    fetch_receivable_for_invoice,
    open_settlement_receivable,
    settle_receivable,
)
from pos.tests.base import POSFixturesMixin
from sales.models import Sale, SalesInvoice


class ReceivableTriggerTests(POSFixturesMixin, TestCase):
    """
    Receivable trigger on invoice insert.

    GUARANTEES:
    - Issued invoices with a customer get exactly one receivable
    - Paid/partial invoices, credit notes and customerless invoices get none
    - Updates never create receivables
    """

    def setUp(self):
        super().setUp()
        self.sale = Sale.objects.create(
            organization=self.organization,
            branch=self.branch,
            customer=self.customer,
            total=Decimal("5000.00"),
            balance=Decimal("5000.00"),
        )
        self._seq = 0

    def _invoice(self, **overrides):
        self._seq += 1
        fields = {
            "organization": self.organization,
            "branch": self.branch,
            "sale": self.sale,
            "customer": self.customer,
            "number": f"FACT-{self._seq:06d}",
            "due_date": timezone.localdate() + timedelta(days=30),
            "currency": "COP",
            "payment_method": "credit",
            "total": Decimal("5000.00"),
            "balance": Decimal("5000.00"),
            "status": SalesInvoice.STATUS_ISSUED,
        }
        fields.update(overrides)
        return SalesInvoice.objects.create(**fields)

    def test_issued_invoice_materializes_receivable(self):
        invoice = self._invoice()

        receivable = AccountReceivable.objects.get(invoice=invoice)
        self.assertEqual(receivable.amount, Decimal("5000.00"))
        self.assertEqual(receivable.balance, Decimal("5000.00"))
        self.assertEqual(receivable.customer_id, self.customer.id)
        self.assertEqual(receivable.sale_id, self.sale.id)
        self.assertEqual(receivable.due_date, invoice.due_date)
        self.assertEqual(receivable.status, AccountReceivable.STATUS_PENDING)

    def test_paid_invoice_has_no_receivable(self):
        self._invoice(status=SalesInvoice.STATUS_PAID)

        self.assertFalse(AccountReceivable.objects.exists())

    def test_credit_note_has_no_receivable(self):
        self._invoice(document_type=SalesInvoice.DOCUMENT_CREDIT_NOTE, total=Decimal("-5000.00"))

        self.assertFalse(AccountReceivable.objects.exists())

    def test_invoice_without_customer_has_no_receivable(self):
        self._invoice(customer=None)

        self.assertFalse(AccountReceivable.objects.exists())

    def test_update_does_not_create_receivable(self):
        invoice = self._invoice(status=SalesInvoice.STATUS_DRAFT)

        invoice.status = SalesInvoice.STATUS_ISSUED
        invoice.save()

        self.assertFalse(AccountReceivable.objects.exists())

    @override_settings(POS={"RECEIVABLE_TRIGGER_ENABLED": False})
    def test_trigger_can_be_disabled(self):
        self._invoice()

        self.assertFalse(AccountReceivable.objects.exists())


class ReceivableServiceTests(POSFixturesMixin, TestCase):
    """
    Read-back retries and receivable writes used by the pipelines.
    """

    def setUp(self):
        super().setUp()
        self.sale = Sale.objects.create(
            organization=self.organization,
            customer=self.customer,
            total=Decimal("5000.00"),
            balance=Decimal("3000.00"),
        )
        self.invoice = SalesInvoice.objects.create(
            organization=self.organization,
            sale=self.sale,
            customer=self.customer,
            number="FACT-000001",
            due_date=timezone.localdate(),
            currency="COP",
            total=Decimal("5000.00"),
            balance=Decimal("3000.00"),
            status=SalesInvoice.STATUS_PARTIAL,
        )

    def test_fetch_retries_then_gives_up(self):
        with mock.patch("accounting.services.receivable_service.time.sleep") as sleep:
            with self.assertRaises(ReceivableNotFound):
                fetch_receivable_for_invoice(invoice_id=self.invoice.id, attempts=3, delay=0.25)

        self.assertEqual(sleep.call_count, 2)
        sleep.assert_called_with(0.25)

    def test_fetch_returns_existing_receivable_without_waiting(self):
        receivable = open_settlement_receivable(
            invoice=self.invoice,
            sale=self.sale,
            customer=self.customer,
            balance=Decimal("3000.00"),
        )

        with mock.patch("accounting.services.receivable_service.time.sleep") as sleep:
            found = fetch_receivable_for_invoice(invoice_id=self.invoice.id)

        self.assertEqual(found.id, receivable.id)
        sleep.assert_not_called()

    def test_settlement_receivable_due_date(self):
        receivable = open_settlement_receivable(
            invoice=self.invoice,
            sale=self.sale,
            customer=self.customer,
            balance=Decimal("3000.00"),
            days=10,
        )

        self.assertEqual(receivable.due_date, timezone.localdate() + timedelta(days=10))
        self.assertEqual(receivable.status, AccountReceivable.STATUS_PARTIAL)

    def test_settlement_receivable_amount_is_sale_total(self):
        receivable = open_settlement_receivable(
            invoice=self.invoice,
            sale=self.sale,
            customer=self.customer,
            balance=Decimal("3000.00"),
        )

        self.assertEqual(receivable.amount, Decimal("5000.00"))
        self.assertEqual(receivable.balance, Decimal("3000.00"))

    def test_settlement_receivable_without_invoice(self):
        receivable = open_settlement_receivable(
            sale=self.sale,
            customer=self.customer,
            balance=Decimal("3000.00"),
        )

        self.assertIsNone(receivable.invoice_id)
        self.assertEqual(receivable.sale_id, self.sale.id)
        self.assertEqual(receivable.organization_id, self.organization.id)

    def test_settle_zeroes_balance(self):
        receivable = open_settlement_receivable(
            invoice=self.invoice,
            sale=self.sale,
            customer=self.customer,
            balance=Decimal("3000.00"),
        )

        settle_receivable(receivable)
        receivable.refresh_from_db()

        self.assertEqual(receivable.balance, Decimal("0.00"))
        self.assertEqual(receivable.status, AccountReceivable.STATUS_PAID)
