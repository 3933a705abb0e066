"""Catalog search with typo tolerance."""
from typing import Iterable, List

import Levenshtein

from stockdash.records.models import Product
from stockdash.utils.logger import get_logger

logger = get_logger()


def search_products(products: Iterable[Product], term: str, fuzzy_threshold: int = 2) -> List[Product]:
    """
    Find products matching a search term.

    Args:
        products: Products to search
        term: Search text; blank returns every product
        fuzzy_threshold: Maximum Levenshtein distance between the term and a
            word of the product name when nothing matches exactly

    Returns:
        Matching products in input order
    """
    products = list(products)
    needle = _normalize(term)
    if not needle:
        return products

    matches = [p for p in products if any(needle in _normalize(text) for text in _searchable(p))]
    if matches or len(needle) <= fuzzy_threshold + 1:
        return matches

    fuzzy = [
        p for p in products
        if any(Levenshtein.distance(needle, word) <= fuzzy_threshold for word in _normalize(p.name).split())
    ]
    if fuzzy:
        logger.debug(f"Fuzzy search for '{term}' matched {len(fuzzy)} products")
    return fuzzy


def _searchable(product: Product) -> List[str]:
    return [product.name, product.sku, product.category_name, product.company_name]


def _normalize(text) -> str:
    return text.strip().lower() if text else ""
