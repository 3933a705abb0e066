"""CRUD access to catalog and transaction entities."""
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from stockdash.config.settings import AppSettings
from stockdash.datastore.base import DataStore, Filter, OrderBy
from stockdash.inventory.search import search_products
from stockdash.inventory.stock import low_stock, expired_products, StockAlert, ExpiredItem
from stockdash.records.fields import parse_amount, is_blank
from stockdash.records.models import Product, Order
from stockdash.records.schemas import (
    CategorySchema,
    CompanySchema,
    ProductSchema,
    OrderSchema,
    ExpenseSchema,
    parse_rows
)
from stockdash.utils.logger import get_logger
from stockdash.utils.exceptions import ValidationError, MalformedRecordError

logger = get_logger()

SCHEMAS = {
    "categories": CategorySchema,
    "companies": CompanySchema,
    "products": ProductSchema,
    "orders": OrderSchema,
    "expenses": ExpenseSchema,
}

REQUIRED_FIELDS = {
    "categories": ("name",),
    "companies": ("name",),
    "products": ("name", "category_id", "company_id"),
    "orders": ("customer_name", "total_amount"),
    "expenses": ("title", "amount", "category"),
}

ORDER_STATUSES = ("Pending", "Paid", "Delivered", "Cancelled")

PRODUCT_SELECT = "*, category:category_id(name), company:company_id(name)"


class CatalogService:
    """List, create, update and delete dashboard entities."""

    def __init__(self, store: DataStore, settings: AppSettings):
        self.store = store
        self.settings = settings

    def list(self, entity: str, order_by: Optional[OrderBy] = None) -> List[Any]:
        """Fetch every row of an entity as models."""
        schema = self._schema(entity)
        select = PRODUCT_SELECT if entity == "products" else "*"
        rows = self.store.query(entity, order_by=order_by or OrderBy("created_at", ascending=False), select=select)
        return parse_rows(schema, rows, entity)

    def create(self, entity: str, fields: Dict[str, Any]) -> Any:
        """Validate required fields, insert and return the stored model."""
        schema = self._schema(entity)
        missing = [name for name in REQUIRED_FIELDS[entity] if is_blank(fields.get(name))]
        if missing:
            raise ValidationError(f"Missing required {entity} fields: {', '.join(missing)}")

        row = self.store.insert(entity, fields)
        logger.info(f"Created {entity} row {row.get('id')}")
        return parse_rows(schema, [row], entity)[0]

    def update(self, entity: str, record_id: str, fields: Dict[str, Any]) -> None:
        self._schema(entity)
        self.store.update(entity, record_id, fields)
        logger.info(f"Updated {entity} row {record_id}")

    def delete(self, entity: str, record_id: str) -> None:
        self._schema(entity)
        self.store.delete(entity, record_id)
        logger.info(f"Deleted {entity} row {record_id}")

    def add_order(
        self,
        customer_name: str,
        amount: Any,
        status: str = "Pending",
        customer_email: Optional[str] = None,
        order_number: Optional[str] = None
    ) -> Order:
        """Record a new order."""
        try:
            total = parse_amount(amount)
        except MalformedRecordError as e:
            raise ValidationError(str(e))
        self._check_status(status)

        return self.create("orders", {
            "customer_name": customer_name,
            "customer_email": customer_email,
            "order_number": order_number,
            "status": status,
            "total_amount": float(total),
            "created_at": datetime.now(timezone.utc).isoformat(),
        })

    def set_order_status(self, order_id: str, status: str) -> None:
        self._check_status(status)
        self.update("orders", order_id, {"status": status})

    def low_stock_products(self) -> List[StockAlert]:
        """Products below the configured restock threshold."""
        rows = self.store.query(
            "products",
            filters=[Filter("quantity", "lt", self.settings.low_stock_threshold)],
            order_by=OrderBy("quantity"),
            select=PRODUCT_SELECT
        )
        products = parse_rows(ProductSchema, rows, "products")
        return low_stock(
            products,
            threshold=self.settings.low_stock_threshold,
            critical=self.settings.critical_stock_threshold
        )

    def expired_products(self, today: date) -> List[ExpiredItem]:
        """Products expired on or before ``today``."""
        rows = self.store.query(
            "products",
            filters=[Filter("expiry_date", "lte", today.isoformat())],
            order_by=OrderBy("expiry_date", ascending=False),
            select=PRODUCT_SELECT
        )
        return expired_products(parse_rows(ProductSchema, rows, "products"), today)

    def search(self, term: str) -> List[Product]:
        """Search products by name, SKU, category or company."""
        return search_products(self.list("products"), term, self.settings.search_fuzzy_threshold)

    @staticmethod
    def _schema(entity: str):
        if entity not in SCHEMAS:
            raise ValidationError(f"Unknown entity: {entity}")
        return SCHEMAS[entity]

    @staticmethod
    def _check_status(status: str) -> None:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"Unknown order status: {status}")
