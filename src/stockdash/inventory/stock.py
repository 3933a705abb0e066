"""Low-stock and expiry views over the product catalog."""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List

from stockdash.records.models import Product

CRITICAL = "critical"
LOW = "low"


@dataclass(frozen=True)
class StockAlert:
    """Product below the restock threshold."""
    product: Product
    level: str


@dataclass(frozen=True)
class ExpiredItem:
    """Product past its expiry date."""
    product: Product
    days_expired: int


def low_stock(products: Iterable[Product], threshold: int = 20, critical: int = 7) -> List[StockAlert]:
    """
    Products with quantity below ``threshold``, lowest quantity first.

    Products with unknown quantity are ignored. Quantities at or below
    ``critical`` are tagged critical, the rest low.
    """
    stocked = [p for p in products if p.quantity is not None and p.quantity < threshold]
    stocked.sort(key=lambda p: (p.quantity, p.name))
    return [StockAlert(p, CRITICAL if p.quantity <= critical else LOW) for p in stocked]


def expired_products(products: Iterable[Product], today: date) -> List[ExpiredItem]:
    """Products whose expiry date is today or earlier, most recent expiry first."""
    expired = [p for p in products if p.expiry_date is not None and p.expiry_date <= today]
    expired.sort(key=lambda p: p.expiry_date, reverse=True)
    return [ExpiredItem(p, (today - p.expiry_date).days) for p in expired]
