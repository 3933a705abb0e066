"""Tests for DataStore implementations."""
import unittest
from datetime import date

import requests

from stockdash.datastore.base import Filter, OrderBy
from stockdash.datastore.memory import MemoryStore
from stockdash.datastore.supabase import SupabaseStore
from stockdash.utils.exceptions import DataFetchError

from fakes import FakeResponse, FakeHttp


class TestFilter(unittest.TestCase):
    """Test filter construction."""

    def test_unknown_operator(self):
        with self.assertRaises(ValueError):
            Filter("quantity", "between", 5)


class TestMemoryStore(unittest.TestCase):
    """Test MemoryStore functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = MemoryStore({
            "products": [
                {"id": "1", "name": "Paracetamol 500mg", "quantity": 4, "expiry_date": "2025-01-10"},
                {"id": "2", "name": "Ibuprofen", "quantity": 15, "expiry_date": None},
                {"id": "3", "name": "Bandage", "quantity": 40, "expiry_date": "2026-05-01"},
                {"id": "4", "name": "Syringe", "quantity": None, "expiry_date": "2024-11-30"},
            ]
        })

    def _ids(self, rows):
        return [row["id"] for row in rows]

    def test_comparison_filters(self):
        """Test lt/gte filters skip missing values."""
        self.assertEqual(self._ids(self.store.query("products", [Filter("quantity", "lt", 20)])), ["1", "2"])
        self.assertEqual(self._ids(self.store.query("products", [Filter("quantity", "gte", 15)])), ["2", "3"])
        self.assertEqual(
            self._ids(self.store.query("products", [Filter("expiry_date", "lte", date(2025, 6, 1).isoformat())])),
            ["1", "4"]
        )

    def test_equality_and_is(self):
        self.assertEqual(self._ids(self.store.query("products", [Filter("name", "eq", "Bandage")])), ["3"])
        self.assertEqual(self._ids(self.store.query("products", [Filter("name", "neq", "Bandage")])), ["1", "2", "4"])
        self.assertEqual(self._ids(self.store.query("products", [Filter("quantity", "is", None)])), ["4"])

    def test_ilike(self):
        """Test case-insensitive pattern matching."""
        rows = self.store.query("products", [Filter("name", "ilike", "%PARA%")])
        self.assertEqual(self._ids(rows), ["1"])

    def test_order_and_limit(self):
        """Test ordering puts missing values last."""
        rows = self.store.query("products", order_by=OrderBy("quantity", ascending=False))
        self.assertEqual(self._ids(rows), ["3", "2", "1", "4"])

        rows = self.store.query("products", order_by=OrderBy("quantity"), limit=2)
        self.assertEqual(self._ids(rows), ["1", "2"])

    def test_unknown_entity_is_empty(self):
        self.assertEqual(self.store.query("orders"), [])

    def test_query_returns_copies(self):
        rows = self.store.query("products")
        rows[0]["name"] = "changed"
        self.assertEqual(self.store.query("products")[0]["name"], "Paracetamol 500mg")

    def test_insert_update_delete(self):
        """Test the write path."""
        row = self.store.insert("orders", {"customer_name": "Alice", "total_amount": 10})
        self.assertIn("id", row)
        self.assertIn("created_at", row)

        self.store.update("orders", row["id"], {"status": "Paid"})
        self.assertEqual(self.store.query("orders")[0]["status"], "Paid")

        self.store.delete("orders", row["id"])
        self.assertEqual(self.store.query("orders"), [])

    def test_write_errors(self):
        with self.assertRaises(DataFetchError):
            self.store.insert("products", {"id": "1", "name": "Duplicate"})
        with self.assertRaises(DataFetchError):
            self.store.update("products", "missing", {"name": "x"})
        with self.assertRaises(DataFetchError):
            self.store.delete("products", "missing")


class TestSupabaseStore(unittest.TestCase):
    """Test SupabaseStore request building and error mapping."""

    def _store(self, *responses):
        http = FakeHttp(*responses)
        store = SupabaseStore("https://demo.supabase.co/", "anon-key", access_token="token", http=http)
        return store, http

    def test_query_params(self):
        """Test PostgREST query string construction."""
        store, http = self._store(FakeResponse(payload=[{"id": "1"}]))

        rows = store.query(
            "products",
            filters=[Filter("quantity", "lt", 20), Filter("name", "ilike", "%para%"), Filter("deleted_at", "is", None)],
            order_by=OrderBy("created_at", ascending=False),
            limit=5
        )

        self.assertEqual(rows, [{"id": "1"}])
        method, url, kwargs = http.calls[0]
        self.assertEqual(method, "GET")
        self.assertEqual(url, "https://demo.supabase.co/rest/v1/products")
        self.assertEqual(kwargs["params"], [
            ("select", "*"),
            ("quantity", "lt.20"),
            ("name", "ilike.*para*"),
            ("deleted_at", "is.null"),
            ("order", "created_at.desc"),
            ("limit", "5"),
        ])
        self.assertEqual(kwargs["headers"]["apikey"], "anon-key")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer token")
        self.assertEqual(kwargs["timeout"], 30)

    def test_insert_returns_row(self):
        store, http = self._store(FakeResponse(201, payload=[{"id": "9", "name": "Rent"}]))

        row = store.insert("expenses", {"name": "Rent"})

        self.assertEqual(row["id"], "9")
        method, _, kwargs = http.calls[0]
        self.assertEqual(method, "POST")
        self.assertEqual(kwargs["json"], [{"name": "Rent"}])
        self.assertEqual(kwargs["headers"]["Prefer"], "return=representation")
        self.assertNotIn("Prefer", store.headers)

    def test_update_and_delete(self):
        store, http = self._store(FakeResponse(204, text=""), FakeResponse(204, text=""))

        store.update("orders", "abc", {"status": "Paid"})
        store.delete("orders", "abc")

        self.assertEqual(http.calls[0][0], "PATCH")
        self.assertEqual(http.calls[0][2]["params"], [("id", "eq.abc")])
        self.assertEqual(http.calls[1][0], "DELETE")

    def test_http_error(self):
        """Test that non-2xx responses surface as fetch errors."""
        store, _ = self._store(FakeResponse(401, text='{"message": "JWT expired"}'))
        with self.assertRaises(DataFetchError):
            store.query("orders")

    def test_network_error_not_retried(self):
        store, http = self._store(requests.ConnectionError("boom"), FakeResponse(payload=[]))
        with self.assertRaises(DataFetchError):
            store.query("orders")
        self.assertEqual(len(http.calls), 1)

    def test_invalid_payloads(self):
        store, _ = self._store(FakeResponse(text="<html>"), FakeResponse(payload={"id": "1"}))
        with self.assertRaises(DataFetchError):
            store.query("orders")
        with self.assertRaises(DataFetchError):
            store.query("orders")


if __name__ == "__main__":
    unittest.main()
