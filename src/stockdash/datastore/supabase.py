"""Supabase (PostgREST) DataStore over HTTPS."""
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence

import requests

from .base import DataStore, Filter, OrderBy
from stockdash.utils.logger import get_logger
from stockdash.utils.exceptions import DataFetchError

logger = get_logger()


class SupabaseStore(DataStore):
    """Talks to the Supabase REST endpoint. Failures are not retried."""

    def __init__(
        self,
        url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: int = 30,
        http: Optional[requests.Session] = None
    ):
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self.http = http or requests.Session()
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
            "Content-Type": "application/json",
        }
        logger.info(f"Supabase store initialized for {url}")

    def query(
        self,
        entity: str,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        select: str = "*"
    ) -> List[Dict[str, Any]]:
        params = [("select", select)]
        for f in filters or ():
            params.append((f.field, f"{f.op}.{_format_value(f)}"))
        if order_by:
            direction = "asc" if order_by.ascending else "desc"
            params.append(("order", f"{order_by.field}.{direction}"))
        if limit is not None:
            params.append(("limit", str(limit)))

        rows = self._request("GET", entity, params=params)
        if not isinstance(rows, list):
            raise DataFetchError(f"Expected a list from {entity}, got {type(rows).__name__}")

        logger.debug(f"Fetched {len(rows)} rows from {entity}")
        return rows

    def insert(self, entity: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        rows = self._request(
            "POST",
            entity,
            json=[fields],
            headers={"Prefer": "return=representation"}
        )
        if not isinstance(rows, list) or not rows:
            raise DataFetchError(f"Insert into {entity} returned no row")
        return rows[0]

    def update(self, entity: str, record_id: str, fields: Dict[str, Any]) -> None:
        self._request("PATCH", entity, params=[("id", f"eq.{record_id}")], json=fields)

    def delete(self, entity: str, record_id: str) -> None:
        self._request("DELETE", entity, params=[("id", f"eq.{record_id}")])

    def _request(self, method: str, entity: str, **kwargs) -> Any:
        url = f"{self.base_url}/{entity}"
        headers = {**self.headers, **kwargs.pop("headers", {})}
        try:
            resp = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Supabase {method} {entity} failed: {e}")
            raise DataFetchError(f"{method} {entity} failed: {e}")

        if not 200 <= resp.status_code < 300:
            logger.error(f"Supabase {method} {entity} returned [{resp.status_code}]: {resp.text[:300]}")
            raise DataFetchError(f"{method} {entity} returned HTTP {resp.status_code}")

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise DataFetchError(f"{method} {entity} returned invalid JSON: {e}")


def _format_value(f: Filter) -> str:
    value = f.value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if f.op == "ilike":
        return str(value).replace("%", "*")
    return str(value)
