"""Tests for stock alerts and product search."""
import unittest
from datetime import date

from stockdash.inventory import low_stock, expired_products, search_products, CRITICAL, LOW
from stockdash.records.models import Product


class TestStockAlerts(unittest.TestCase):
    """Test low stock and expiry views."""

    def setUp(self):
        """Set up test fixtures."""
        self.products = [
            Product("1", "Paracetamol 500mg", quantity=12, expiry_date=date(2025, 3, 1)),
            Product("2", "Amoxicillin", quantity=3, expiry_date=date(2025, 3, 10)),
            Product("3", "Bandage", quantity=20, expiry_date=date(2026, 1, 1)),
            Product("4", "Syringe", quantity=7),
            Product("5", "Gloves", quantity=None, expiry_date=date(2025, 3, 9)),
        ]

    def test_low_stock_levels(self):
        """Test threshold, ordering and critical tagging."""
        alerts = low_stock(self.products, threshold=20, critical=7)

        self.assertEqual([a.product.id for a in alerts], ["2", "4", "1"])
        self.assertEqual([a.level for a in alerts], [CRITICAL, CRITICAL, LOW])

    def test_low_stock_ignores_unknown_quantity(self):
        self.assertNotIn("5", [a.product.id for a in low_stock(self.products)])

    def test_expired_products(self):
        """Test expiry on or before today, most recent first."""
        items = expired_products(self.products, date(2025, 3, 10))

        self.assertEqual([i.product.id for i in items], ["2", "5", "1"])
        self.assertEqual([i.days_expired for i in items], [0, 1, 9])

    def test_nothing_expired(self):
        self.assertEqual(expired_products(self.products, date(2024, 12, 31)), [])


class TestSearchProducts(unittest.TestCase):
    """Test catalog search."""

    def setUp(self):
        """Set up test fixtures."""
        self.products = [
            Product("1", "Paracetamol 500mg", sku="PCM-500", category_name="Medicine", company_name="Acme Pharma"),
            Product("2", "Cotton Bandage", sku="BND-01", category_name="First Aid", company_name="Medisupply"),
            Product("3", "Hand Gloves", sku="GLV-M", category_name="First Aid", company_name="Acme Pharma"),
        ]

    def _ids(self, products):
        return [p.id for p in products]

    def test_blank_term_returns_all(self):
        self.assertEqual(self._ids(search_products(self.products, "  ")), ["1", "2", "3"])

    def test_substring_fields(self):
        """Test matching on name, SKU, category and company."""
        self.assertEqual(self._ids(search_products(self.products, "bandage")), ["2"])
        self.assertEqual(self._ids(search_products(self.products, "pcm")), ["1"])
        self.assertEqual(self._ids(search_products(self.products, "first aid")), ["2", "3"])
        self.assertEqual(self._ids(search_products(self.products, "ACME")), ["1", "3"])

    def test_fuzzy_fallback(self):
        """Test that a misspelt name still finds the product."""
        self.assertEqual(self._ids(search_products(self.products, "paracetmol")), ["1"])
        self.assertEqual(self._ids(search_products(self.products, "glovs")), ["3"])

    def test_short_terms_not_fuzzy(self):
        self.assertEqual(search_products(self.products, "xq"), [])

    def test_no_match(self):
        self.assertEqual(search_products(self.products, "ventilator"), [])


if __name__ == "__main__":
    unittest.main()
