"""Shared Supabase data access helpers."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterable
from typing import Any

from postgrest import APIError

from classbank.config import settings
from classbank.utils.errors import InvalidInputError, NotFoundError
from supabase import Client

logger = logging.getLogger(__name__)
_user_cache: dict[str, tuple[float, dict[str, Any]]] = {}
_cache_lock = threading.Lock()


def _cache_get(cache: dict[Any, tuple[float, Any]], key: Any) -> Any | None:
    now = time.monotonic()
    with _cache_lock:
        entry = cache.get(key)
        if not entry:
            return None
        expires_at, value = entry
        if expires_at <= now:
            cache.pop(key, None)
            return None
        return value


def _cache_set(
    cache: dict[Any, tuple[float, Any]],
    key: Any,
    value: Any,
    ttl_seconds: int,
) -> None:
    if ttl_seconds <= 0:
        return

    with _cache_lock:
        max_entries = max(100, settings.data_cache_max_entries)
        if len(cache) >= max_entries:
            oldest_key = next(iter(cache))
            cache.pop(oldest_key, None)
        cache[key] = (time.monotonic() + ttl_seconds, value)


def forget_user(user_id: str) -> None:
    """Drop a cached user row after its role or profile changed."""
    with _cache_lock:
        _user_cache.pop(str(user_id), None)


class SupabaseService:
    """Thin helper wrapper around a Supabase client."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def execute(self, query, default: Any = None) -> Any:
        """Execute a Supabase query and normalize API errors."""
        started = time.perf_counter()
        try:
            response = query.execute()
            elapsed_ms = (time.perf_counter() - started) * 1000
            threshold_ms = settings.slow_query_log_threshold_ms
            if threshold_ms > 0 and elapsed_ms >= threshold_ms:
                logger.warning("Slow Supabase query %.1fms", elapsed_ms)
            data = response.data
            return default if data is None and default is not None else data
        except APIError as exc:
            message = getattr(exc, "message", "Database request failed")
            raise InvalidInputError(str(message)) from exc

    def rpc(self, function: str, params: dict[str, Any]) -> dict[str, Any]:
        """Call a Postgres function that returns one status row."""
        rows = self.execute(self.client.rpc(function, params), default=[])
        if isinstance(rows, dict):
            return rows
        if not rows:
            raise InvalidInputError(f"{function} returned no result")
        return rows[0]

    def select_one(
        self,
        table: str,
        filters: dict[str, Any],
        columns: str = "*",
        not_found_label: str | None = None,
    ) -> dict[str, Any]:
        """Select a single row and raise NotFoundError when missing."""
        query = self.client.table(table).select(columns)
        for key, value in filters.items():
            query = query.eq(key, value)
        rows = self.execute(query.limit(1), default=[])
        if not rows:
            label = not_found_label or table
            raise NotFoundError(label)
        return rows[0]

    def select_many(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict[str, Any]]:
        """Select many rows from a table with optional filters and paging."""
        query = self.client.table(table).select(columns)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return self.execute(query, default=[])

    def select_all(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        columns: str = "*",
        order_by: str = "id",
    ) -> list[dict[str, Any]]:
        """Select every matching row, paging past the PostgREST ``max-rows`` cap.

        A short page may just be the server cap, so paging stops only on an
        empty page.
        """
        page_size = max(1, settings.select_page_size)
        rows: list[dict[str, Any]] = []
        while True:
            page = self.select_many(
                table,
                filters=filters,
                columns=columns,
                order_by=order_by,
                limit=page_size,
                offset=len(rows),
            )
            if not page:
                return rows
            rows.extend(page)

    def rpc_rows(self, function: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Call a set-returning Postgres function."""
        return self.execute(self.client.rpc(function, params or {}), default=[])

    def select_in(
        self,
        table: str,
        column: str,
        values: Iterable[Any],
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """Select rows whose ``column`` is one of ``values``."""
        keys = list({str(value) for value in values})
        if not keys:
            return []
        return self.execute(
            self.client.table(table).select(columns).in_(column, keys),
            default=[],
        )

    def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        """Count rows in a table with optional equality filters."""
        query = self.client.table(table).select("*", count="exact", head=True)
        if filters:
            for key, value in filters.items():
                query = query.eq(key, value)
        try:
            response = query.execute()
            return response.count or 0
        except APIError as exc:
            message = getattr(exc, "message", "Database request failed")
            raise InvalidInputError(str(message)) from exc

    def insert_one(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return the created object."""
        rows = self.execute(self.client.table(table).insert(payload), default=[])
        if not rows:
            raise InvalidInputError(f"Failed to insert into {table}")
        return rows[0]

    def insert_ignore(
        self,
        table: str,
        payload: dict[str, Any],
        on_conflict: str,
    ) -> list[dict[str, Any]]:
        """Insert a row unless one already holds the ``on_conflict`` key.

        Returns the inserted rows, which is empty when the row already existed.
        """
        query = self.client.table(table).upsert(
            payload,
            on_conflict=on_conflict,
            ignore_duplicates=True,
        )
        return self.execute(query, default=[])

    def update(
        self,
        table: str,
        filters: dict[str, Any],
        payload: dict[str, Any],
    ) -> list[dict[str, Any]]:
        """Update rows by equality filters and return the updated rows."""
        query = self.client.table(table).update(payload)
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete rows by equality filters and return removed rows."""
        query = self.client.table(table).delete()
        for key, value in filters.items():
            query = query.eq(key, value)
        return self.execute(query, default=[])

    def get_user(self, user_id: str) -> dict[str, Any]:
        """Return a public user record."""
        cache_key = str(user_id)
        cached_user = _cache_get(_user_cache, cache_key)
        if cached_user is not None:
            return dict(cached_user)

        user = self.select_one("users", {"id": user_id}, not_found_label="User")
        _cache_set(_user_cache, cache_key, dict(user), settings.user_cache_ttl_seconds)
        return user

    def get_users_map(self, user_ids: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Fetch multiple users and return an id-keyed mapping."""
        ids = list({str(uid) for uid in user_ids})
        if not ids:
            return {}

        result: dict[str, dict[str, Any]] = {}
        missing_ids: list[str] = []
        for user_id in ids:
            cached_user = _cache_get(_user_cache, user_id)
            if cached_user is None:
                missing_ids.append(user_id)
                continue
            result[user_id] = dict(cached_user)

        if missing_ids:
            for row in self.select_in("users", "id", missing_ids):
                user_key = str(row["id"])
                user_payload = dict(row)
                result[user_key] = user_payload
                _cache_set(_user_cache, user_key, user_payload, settings.user_cache_ttl_seconds)

        return result


def map_rows_on_field(
    rows: list[dict[str, Any]],
    related: dict[str, dict[str, Any]],
    key: str,
    out_key: str,
) -> list[dict[str, Any]]:
    """Attach related records to rows based on ``key``."""
    enriched: list[dict[str, Any]] = []
    for row in rows:
        payload = dict(row)
        payload[out_key] = related.get(str(row[key]))
        enriched.append(payload)
    return enriched
