"""Data models for dashboard records and report output."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional


@dataclass
class Record:
    """Transactional row fetched from the DataStore.

    ``amount`` and ``created_at`` are kept as stored; parsing happens in the
    aggregator so incomplete rows can still be reported.
    """
    id: Optional[str]
    amount: Any = None
    created_at: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        """Look up a declared field, falling back to extra columns."""
        value = getattr(self, name, None)
        if value is None:
            value = self.extra.get(name)
        return default if value is None else value


@dataclass
class Order(Record):
    """Sales order."""
    order_number: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    status: Optional[str] = None


@dataclass
class Expense(Record):
    """Business expense."""
    title: Optional[str] = None
    category: Optional[str] = None
    vendor: Optional[str] = None
    description: Optional[str] = None
    reference_number: Optional[str] = None
    expense_date: Any = None


@dataclass
class Product:
    """Catalog product with stock level."""
    id: str
    name: str
    sku: Optional[str] = None
    description: Optional[str] = None
    price: Any = None
    cost_price: Any = None
    quantity: Optional[int] = None
    expiry_date: Optional[date] = None
    category_id: Optional[str] = None
    company_id: Optional[str] = None
    category_name: Optional[str] = None
    company_name: Optional[str] = None


@dataclass
class Category:
    """Product category."""
    id: str
    name: str
    description: Optional[str] = None


@dataclass
class Company:
    """Supplier company."""
    id: str
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


@dataclass
class UserAccount:
    """Dashboard user row."""
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: str = "user"
    status: str = "active"
    created_at: Any = None


@dataclass(frozen=True)
class TimeBucket:
    """Total over one calendar day or month."""
    label: str
    total_amount: Decimal


@dataclass(frozen=True)
class SummaryStats:
    """Totals over a record set."""
    total_amount: Decimal
    count: int
    unique_entities: int

    @property
    def average_amount(self) -> Decimal:
        if not self.count:
            return Decimal("0.00")
        return (self.total_amount / self.count).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
