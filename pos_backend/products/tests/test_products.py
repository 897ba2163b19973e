# products/tests/test_products.py

from decimal import Decimal

from django.db import IntegrityError, transaction
from django.test import TestCase

from organizations.models import Organization
from products.models import Product
from products.services.catalog import ProductNotFound, get_product, get_product_tax_overrides
from taxes.models import OrganizationTax, ProductTaxOverride


class ProductCatalogTests(TestCase):
    """
    Product model + catalog lookups.

    GUARANTEES:
    - SKU is unique per organization (not globally)
    - Lookups never leak products across organizations
    - Only active taxes count as overrides
    """

    def setUp(self):
        self.organization = Organization.objects.create(name="Tienda Centro")
        self.other_organization = Organization.objects.create(name="Tienda Norte")

        self.product = Product.objects.create(
            organization=self.organization,
            name="Coffee 500g",
            sku="COF-500",
            unit_price=Decimal("5000.00"),
        )

    def test_sku_unique_per_organization(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Product.objects.create(
                    organization=self.organization,
                    name="Coffee duplicate",
                    sku="COF-500",
                    unit_price=Decimal("1.00"),
                )

        Product.objects.create(
            organization=self.other_organization,
            name="Coffee",
            sku="COF-500",
            unit_price=Decimal("4800.00"),
        )

    def test_get_product_is_organization_scoped(self):
        self.assertEqual(
            get_product(organization=self.organization, product_id=self.product.id),
            self.product,
        )

        with self.assertRaises(ProductNotFound):
            get_product(organization=self.other_organization, product_id=self.product.id)

    def test_inactive_product_hidden_unless_requested(self):
        self.product.is_active = False
        self.product.save()

        with self.assertRaises(ProductNotFound):
            get_product(organization=self.organization, product_id=self.product.id)

        found = get_product(organization=self.organization, product_id=self.product.id, active_only=False)
        self.assertEqual(found.id, self.product.id)

    def test_overrides_ignore_inactive_taxes(self):
        active = OrganizationTax.objects.create(organization=self.organization, name="Reduced", rate=Decimal("5"))
        retired = OrganizationTax.objects.create(
            organization=self.organization, name="Old", rate=Decimal("8"), is_active=False
        )
        ProductTaxOverride.objects.create(product=self.product, tax=active)
        ProductTaxOverride.objects.create(product=self.product, tax=retired)

        self.assertEqual(get_product_tax_overrides(product_id=self.product.id), [active])

    def test_no_overrides_means_empty_list(self):
        self.assertEqual(get_product_tax_overrides(product_id=self.product.id), [])
