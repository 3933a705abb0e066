"""Dictionary-backed DataStore for tests and local demos."""
import copy
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .base import DataStore, Filter, OrderBy
from stockdash.utils.logger import get_logger
from stockdash.utils.exceptions import DataFetchError

logger = get_logger()


class MemoryStore(DataStore):
    """Keeps rows per entity in insertion order."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            entity: [dict(row) for row in rows] for entity, rows in (tables or {}).items()
        }

    def query(
        self,
        entity: str,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        select: str = "*"
    ) -> List[Dict[str, Any]]:
        rows = [row for row in self.tables.get(entity, []) if self._matches(row, filters or ())]

        if order_by:
            present = [row for row in rows if row.get(order_by.field) is not None]
            missing = [row for row in rows if row.get(order_by.field) is None]
            try:
                present.sort(key=lambda row: row[order_by.field], reverse=not order_by.ascending)
            except TypeError as e:
                raise DataFetchError(f"Cannot order {entity} by {order_by.field}: {e}")
            rows = present + missing

        if limit is not None:
            rows = rows[:limit]

        logger.debug(f"MemoryStore query {entity}: {len(rows)} rows")
        return copy.deepcopy(rows)

    def insert(self, entity: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        row = dict(fields)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)

        table = self.tables.setdefault(entity, [])
        if any(existing.get("id") == row["id"] for existing in table):
            raise DataFetchError(f"Duplicate {entity} id: {row['id']}")
        table.append(row)
        return dict(row)

    def update(self, entity: str, record_id: str, fields: Dict[str, Any]) -> None:
        row = self._find(entity, record_id)
        row.update(fields)
        row["updated_at"] = datetime.now(timezone.utc).isoformat()

    def delete(self, entity: str, record_id: str) -> None:
        row = self._find(entity, record_id)
        self.tables[entity].remove(row)

    def _find(self, entity: str, record_id: str) -> Dict[str, Any]:
        for row in self.tables.get(entity, []):
            if str(row.get("id")) == str(record_id):
                return row
        raise DataFetchError(f"{entity} row not found: {record_id}")

    @staticmethod
    def _matches(row: Dict[str, Any], filters: Sequence[Filter]) -> bool:
        for f in filters:
            value = row.get(f.field)
            if f.op == "is":
                if value is not f.value:
                    return False
                continue
            if f.op == "eq":
                if value != f.value:
                    return False
                continue
            if f.op == "neq":
                if value == f.value:
                    return False
                continue
            if value is None:
                return False
            if f.op == "ilike":
                if not _like(str(f.value)).match(str(value)):
                    return False
                continue
            try:
                if f.op == "lt" and not value < f.value:
                    return False
                if f.op == "lte" and not value <= f.value:
                    return False
                if f.op == "gt" and not value > f.value:
                    return False
                if f.op == "gte" and not value >= f.value:
                    return False
            except TypeError:
                return False
        return True


def _like(pattern: str) -> "re.Pattern":
    """Compile an SQL LIKE pattern (% and _ wildcards) case-insensitively."""
    parts = []
    for char in pattern:
        if char in "%*":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE | re.DOTALL)
