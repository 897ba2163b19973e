"""
======================================================
PATH: accounting/migrations/0002_receivable_invoice_nullable.py
======================================================
MIGRATION: AccountReceivable.invoice becomes optional

Partial checkouts whose invoice step degraded still open a receivable
against the sale.
"""

from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ("accounting", "0001_initial"),
        ("sales", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="accountreceivable",
            name="invoice",
            field=models.OneToOneField(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="receivable",
                to="sales.salesinvoice",
            ),
        ),
    ]
