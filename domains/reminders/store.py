"""Persistence for reminders.

The scheduler and the tools only depend on `ReminderStore`: filtered select,
insert and filtered delete over one table. Supabase (PostgREST) is the
production backend; the in-memory store is used when Supabase is not
configured.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx
from dateutil.parser import parse as parse_datetime

from config import SUPABASE_URL, SUPABASE_KEY, REMINDERS_HTTP_TIMEOUT
from logger import logger
from .errors import PersistenceError

OPERATORS = ("eq", "lte", "in")


@dataclass
class Filter:
    """Single column condition. A list of filters is ANDed."""
    field: str
    operator: str
    value: Any

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.operator}")


class ReminderStore(ABC):
    """Filtered read, insert and filtered delete over a table."""

    @abstractmethod
    async def select(self, table: str, filters: list[Filter] | None = None) -> list[dict]:
        pass

    @abstractmethod
    async def insert(self, table: str, records: dict | list[dict]) -> bool:
        pass

    @abstractmethod
    async def delete(self, table: str, filters: list[Filter]) -> bool:
        pass


def _format_value(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _to_query_param(f: Filter) -> tuple[str, str]:
    """Render a filter as a PostgREST query parameter."""
    if f.operator == "in":
        values = ",".join(f'"{_format_value(v)}"' for v in f.value)
        return f.field, f"in.({values})"
    return f.field, f"{f.operator}.{_format_value(f.value)}"


class SupabaseReminderStore(ReminderStore):
    """Supabase persistence using PostgREST directly."""

    def __init__(self, url: str, key: str, timeout: float = REMINDERS_HTTP_TIMEOUT):
        self.url = url.rstrip("/")
        self.key = key
        self.timeout = timeout

    def _headers(self) -> dict:
        """Get headers for Supabase API calls."""
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
        }

    def _table_url(self, table: str) -> str:
        return f"{self.url}/rest/v1/{table}"

    async def select(self, table: str, filters: list[Filter] | None = None) -> list[dict]:
        params = [("select", "*")] + [_to_query_param(f) for f in filters or []]
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    self._table_url(table),
                    headers=self._headers(),
                    params=params,
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json() or []
        except (httpx.HTTPError, ValueError) as e:
            raise PersistenceError(f"Failed to select from {table}: {e}") from e

    async def insert(self, table: str, records: dict | list[dict]) -> bool:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self._table_url(table),
                    headers=self._headers(),
                    json=records,
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.status_code == 201
        except (httpx.HTTPError, ValueError) as e:
            raise PersistenceError(f"Failed to insert into {table}: {e}") from e

    async def delete(self, table: str, filters: list[Filter]) -> bool:
        if not filters:
            # PostgREST refuses unfiltered deletes anyway
            raise ValueError("Refusing to delete without filters")

        try:
            async with httpx.AsyncClient() as client:
                response = await client.delete(
                    self._table_url(table),
                    headers=self._headers(),
                    params=[_to_query_param(f) for f in filters],
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.is_success
        except (httpx.HTTPError, ValueError) as e:
            raise PersistenceError(f"Failed to delete from {table}: {e}") from e


def _comparable(row_value: Any, filter_value: Any) -> Any:
    """Coerce a stored value so it compares against the filter value."""
    if isinstance(filter_value, datetime) and isinstance(row_value, str):
        return parse_datetime(row_value)
    return row_value


def _matches(row: dict, f: Filter) -> bool:
    value = row.get(f.field)
    if f.operator == "in":
        return any(_comparable(value, v) == v for v in f.value)
    if value is None:
        return False
    value = _comparable(value, f.value)
    if f.operator == "eq":
        return value == f.value
    return value <= f.value


class InMemoryReminderStore(ReminderStore):
    """Process-local store with the same filter semantics.

    Rows are kept in insertion order, which is also the select order.
    """

    def __init__(self):
        self._tables: dict[str, list[dict]] = {}

    async def select(self, table: str, filters: list[Filter] | None = None) -> list[dict]:
        rows = self._tables.get(table, [])
        return [dict(row) for row in rows if all(_matches(row, f) for f in filters or [])]

    async def insert(self, table: str, records: dict | list[dict]) -> bool:
        if isinstance(records, dict):
            records = [records]
        rows = self._tables.setdefault(table, [])
        for record in records:
            rows.append({"id": str(uuid.uuid4()), **record})
        return True

    async def delete(self, table: str, filters: list[Filter]) -> bool:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        rows = self._tables.get(table, [])
        self._tables[table] = [row for row in rows if not all(_matches(row, f) for f in filters)]
        return True


def build_store() -> ReminderStore:
    """Supabase when configured, otherwise an in-memory store."""
    if not SUPABASE_URL or not SUPABASE_KEY:
        logger.warning("Supabase not configured, reminders will only be kept in memory")
        return InMemoryReminderStore()
    return SupabaseReminderStore(SUPABASE_URL, SUPABASE_KEY)
