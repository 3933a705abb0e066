"""Inventory views."""
from .stock import StockAlert, ExpiredItem, low_stock, expired_products, CRITICAL, LOW
from .search import search_products

__all__ = ["StockAlert", "ExpiredItem", "low_stock", "expired_products", "CRITICAL", "LOW", "search_products"]
