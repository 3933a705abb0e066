"""Pydantic schemas validating rows returned by the DataStore."""
from datetime import date
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, ValidationError, field_validator, model_validator

from .fields import parse_amount, parse_date, is_blank
from .models import Order, Expense, Product, Category, Company, UserAccount
from stockdash.utils.logger import get_logger
from stockdash.utils.exceptions import DataFetchError, MalformedRecordError

logger = get_logger()


def _as_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


class RowSchema(BaseModel):
    """Base row. A blank or missing id is read as None; parse_rows decides
    whether that is an error."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_to_text(cls, value):
        if isinstance(value, bool) or is_blank(value):
            return None
        return _as_text(value)

    def extras(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class OrderSchema(RowSchema):
    """Order row; legacy rows carry ``amount``/``customer`` instead of
    ``total_amount``/``customer_name``."""
    amount: Any = Field(default=None, validation_alias=AliasChoices("total_amount", "amount"))
    created_at: Any = None
    order_number: Optional[str] = None
    customer_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("customer_name", "customer"))
    customer_email: Optional[str] = None
    status: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def legacy_columns(cls, data):
        """Fall back to legacy columns when the current ones are null."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for current, legacy in (("total_amount", "amount"), ("customer_name", "customer")):
            if is_blank(data.get(current)) and not is_blank(data.get(legacy)):
                data[current] = data[legacy]
        return data

    @field_validator("order_number", "customer_name", "customer_email", "status", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return _as_text(value)

    def to_model(self) -> Order:
        return Order(
            id=self.id,
            amount=self.amount,
            created_at=self.created_at,
            extra=self.extras(),
            order_number=self.order_number,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            status=self.status
        )


class ExpenseSchema(RowSchema):
    """Expense row."""
    amount: Any = None
    created_at: Any = None
    expense_date: Any = None
    title: Optional[str] = None
    category: Optional[str] = None
    vendor: Optional[str] = None
    description: Optional[str] = None
    reference_number: Optional[str] = None

    @field_validator("title", "category", "vendor", "description", "reference_number", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return _as_text(value)

    def to_model(self) -> Expense:
        created_at = self.expense_date if is_blank(self.created_at) else self.created_at
        return Expense(
            id=self.id,
            amount=self.amount,
            created_at=created_at,
            extra=self.extras(),
            title=self.title,
            category=self.category,
            vendor=self.vendor,
            description=self.description,
            reference_number=self.reference_number,
            expense_date=self.expense_date
        )


class ProductSchema(RowSchema):
    """Product row, optionally joined with category and company names."""
    name: str
    sku: Optional[str] = None
    description: Optional[str] = None
    price: Any = None
    cost_price: Any = None
    quantity: Any = None
    expiry_date: Any = None
    category_id: Optional[str] = None
    company_id: Optional[str] = None
    category: Optional[Dict[str, Any]] = None
    company: Optional[Dict[str, Any]] = None

    @field_validator("name", "sku", "description", "category_id", "company_id", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return _as_text(value)

    def to_model(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            sku=self.sku,
            description=self.description,
            price=self.price,
            cost_price=self.cost_price,
            quantity=_quantity(self.quantity),
            expiry_date=_expiry(self.expiry_date),
            category_id=self.category_id,
            company_id=self.company_id,
            category_name=(self.category or {}).get("name"),
            company_name=(self.company or {}).get("name")
        )


class CategorySchema(RowSchema):
    name: str
    description: Optional[str] = None

    def to_model(self) -> Category:
        return Category(id=self.id, name=self.name, description=self.description)


class CompanySchema(RowSchema):
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("phone", mode="before")
    @classmethod
    def coerce_text(cls, value):
        return _as_text(value)

    def to_model(self) -> Company:
        return Company(
            id=self.id,
            name=self.name,
            contact_person=self.contact_person,
            email=self.email,
            phone=self.phone,
            address=self.address
        )


class UserSchema(RowSchema):
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    created_at: Any = None

    def to_model(self) -> UserAccount:
        return UserAccount(
            id=self.id,
            email=self.email,
            full_name=self.full_name,
            role=self.role or "user",
            status=self.status or "active",
            created_at=self.created_at
        )


def _quantity(value: Any) -> Optional[int]:
    try:
        return int(parse_amount(value, "quantity"))
    except MalformedRecordError:
        return None


def _expiry(value: Any) -> Optional[date]:
    if is_blank(value):
        return None
    try:
        return parse_date(value, "expiry_date")
    except MalformedRecordError:
        return None


def parse_rows(schema: Type[RowSchema], rows: Any, entity: str, strict: bool = True) -> List[Any]:
    """
    Validate DataStore rows and convert them to models.

    Args:
        schema: Row schema for the entity
        rows: Payload returned by the DataStore
        entity: Entity name used in messages
        strict: When False, rows failing validation are skipped and rows
            without an id are kept with id None, so reports can be built
            from partial data

    Raises:
        DataFetchError: payload is not a list of rows, or in strict mode a
            row is malformed or has no id
    """
    if not isinstance(rows, list):
        raise DataFetchError(f"Expected a list of {entity} rows, got {type(rows).__name__}")

    models = []
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise DataFetchError(f"Malformed {entity} row #{index}: not an object")
        try:
            model = schema.model_validate(row).to_model()
        except ValidationError as e:
            reason = e.errors()[0]["msg"]
            if strict:
                raise DataFetchError(f"Malformed {entity} row #{index}: {reason}")
            logger.warning(f"Skipping malformed {entity} row #{index}: {reason}")
            continue

        if model.id is None:
            if strict:
                raise DataFetchError(f"Malformed {entity} row #{index}: id is required")
            logger.debug(f"{entity} row #{index} has no id")
        models.append(model)
    return models
