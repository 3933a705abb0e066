"""Record models, field parsers and row schemas."""
from .models import (
    Record,
    Order,
    Expense,
    Product,
    Category,
    Company,
    UserAccount,
    TimeBucket,
    SummaryStats
)
from .fields import parse_amount, amount_or_zero, parse_timestamp, timestamp_or_none, field_value
from .schemas import (
    OrderSchema,
    ExpenseSchema,
    ProductSchema,
    CategorySchema,
    CompanySchema,
    UserSchema,
    parse_rows
)

__all__ = [
    "Record",
    "Order",
    "Expense",
    "Product",
    "Category",
    "Company",
    "UserAccount",
    "TimeBucket",
    "SummaryStats",
    "parse_amount",
    "amount_or_zero",
    "parse_timestamp",
    "timestamp_or_none",
    "field_value",
    "OrderSchema",
    "ExpenseSchema",
    "ProductSchema",
    "CategorySchema",
    "CompanySchema",
    "UserSchema",
    "parse_rows"
]
