"""Field parsers shared by aggregation and export.

All timestamps are normalised to UTC. Naive datetimes and bare dates are
read as UTC; aware datetimes are converted.
"""
import re
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from decimal import Decimal, DecimalException
from typing import Any

from stockdash.utils.logger import get_logger
from stockdash.utils.exceptions import MalformedRecordError

logger = get_logger()

ZERO = Decimal("0")

# Largest stored amount accepted; keeps sums and 0.01 quantizing inside the decimal context
MAX_AMOUNT = Decimal("1e15")

_LEADING_LABEL = re.compile(r"^[^\d+\-.]+")
_TRAILING_LABEL = re.compile(r"[^\d.]+$")
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def field_value(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping row or a record object."""
    if isinstance(record, Mapping):
        value = record.get(name)
    else:
        value = getattr(record, name, None)
        extra = getattr(record, "extra", None)
        if value is None and isinstance(extra, Mapping):
            value = extra.get(name)
    return default if value is None else value


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Parse a currency value into a Decimal.

    Accepts numbers and strings carrying a currency label or thousands
    separators ("$120.50", "Frw 1,200").

    Raises:
        MalformedRecordError: value is missing, non-numeric, not finite or
            beyond MAX_AMOUNT
    """
    if value is None:
        raise MalformedRecordError(field, value, "missing")
    if isinstance(value, bool):
        raise MalformedRecordError(field, value, "boolean is not an amount")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value)) if value == value else Decimal("NaN")
    elif isinstance(value, str):
        text = value.strip().replace(",", "").replace(" ", "")
        text = _TRAILING_LABEL.sub("", _LEADING_LABEL.sub("", text))
        if not text:
            raise MalformedRecordError(field, value, "no digits")
        try:
            amount = Decimal(text)
        except DecimalException:
            raise MalformedRecordError(field, value, "not a number")
    else:
        raise MalformedRecordError(field, value, f"unsupported type {type(value).__name__}")

    if not amount.is_finite():
        raise MalformedRecordError(field, value, "not finite")
    if amount.copy_abs() >= MAX_AMOUNT:
        raise MalformedRecordError(field, value, "out of range")
    return amount


def amount_or_zero(value: Any, field: str = "amount") -> Decimal:
    """Parse an amount, substituting zero for missing or malformed values."""
    try:
        return parse_amount(value, field)
    except MalformedRecordError as e:
        logger.debug(f"Substituting 0 for {e}")
        return ZERO


def to_utc(moment: datetime) -> datetime:
    """Return an aware UTC datetime."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_timestamp(value: Any, field: str = "created_at") -> datetime:
    """
    Parse a timestamp into an aware UTC datetime.

    Raises:
        MalformedRecordError: value is missing or not an ISO-8601 date/time
    """
    if value is None:
        raise MalformedRecordError(field, value, "missing")
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str):
        raise MalformedRecordError(field, value, f"unsupported type {type(value).__name__}")

    text = value.strip()
    if not text:
        raise MalformedRecordError(field, value, "blank")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        if _DATE_ONLY.match(text):
            return datetime.combine(date.fromisoformat(text), time.min, tzinfo=timezone.utc)
        return to_utc(datetime.fromisoformat(text))
    except ValueError:
        raise MalformedRecordError(field, value, "not ISO-8601")


def timestamp_or_none(value: Any, field: str = "created_at"):
    """Parse a timestamp, returning None for missing or malformed values."""
    try:
        return parse_timestamp(value, field)
    except MalformedRecordError as e:
        logger.debug(f"Skipping {e}")
        return None


def parse_date(value: Any, field: str = "date") -> date:
    """Parse a calendar date (UTC day of a timestamp)."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_timestamp(value, field).date()


def is_blank(value: Any) -> bool:
    """True for None and whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())
