"""
Abstract DataStore interface.

The dashboard's rows live in an external backend. Services talk to it only
through this contract so the backend can be swapped for an in-memory store
in tests.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

FILTER_OPS = ("eq", "neq", "lt", "lte", "gt", "gte", "ilike", "is")


@dataclass(frozen=True)
class Filter:
    """Field predicate, e.g. Filter("quantity", "lt", 20)."""
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter operator: {self.op!r}")


@dataclass(frozen=True)
class OrderBy:
    """Sort key."""
    field: str
    ascending: bool = True


class DataStore(ABC):
    """
    Query/insert/update/delete access to stored entities.

    Every method raises DataFetchError when the backend call fails or
    returns something that is not the expected shape.
    """

    @abstractmethod
    def query(
        self,
        entity: str,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        select: str = "*"
    ) -> List[Dict[str, Any]]:
        """
        Fetch rows of an entity.

        Args:
            entity: Table name
            filters: Predicates combined with AND
            order_by: Optional sort key
            limit: Maximum number of rows
            select: Column selection (backend syntax, joins allowed)

        Returns:
            List of row dictionaries
        """
        pass

    @abstractmethod
    def insert(self, entity: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a row and return it as stored."""
        pass

    @abstractmethod
    def update(self, entity: str, record_id: str, fields: Dict[str, Any]) -> None:
        """Update columns of the row with the given id."""
        pass

    @abstractmethod
    def delete(self, entity: str, record_id: str) -> None:
        """Delete the row with the given id."""
        pass
