"""
In-memory stand-in for the hosted store client used across storefront tests.

Implements the same table-scoped surface as StoreClient (select, select_one,
count, insert, update, upsert, delete) with the same filter conventions, so
services can be exercised without any network access.
"""

from __future__ import annotations

import copy
import itertools
import re
import time
from datetime import UTC, datetime, timedelta
from typing import Any

from apps.api_client.services import HTTP_CONFLICT, PG_UNIQUE_VIOLATION, StoreAPIError
from apps.users.schemas import StorefrontSession

# Uniqueness constraints declared on the hosted tables
UNIQUE_KEYS: dict[str, tuple[str, ...]] = {
    'cart_items': ('user_id', 'product_id'),
    'reviews': ('user_id', 'product_id'),
    'profiles': ('user_id',),
    'wishlist_items': ('user_id', 'product_id'),
}

_BASE_TIME = datetime(2026, 1, 1, tzinfo=UTC)


def _ilike(pattern: str, value: Any) -> bool:
    if value is None:
        return False
    regex = '^' + '.*'.join(re.escape(part) for part in str(pattern).split('%')) + '$'
    return re.match(regex, str(value), flags=re.IGNORECASE) is not None


def _matches(row: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    for column, condition in (filters or {}).items():
        if isinstance(condition, tuple):
            operator, value = condition
        else:
            operator, value = ('is', None) if condition is None else ('eq', condition)

        current = row.get(column)
        if operator == 'eq' and current != value:
            return False
        if operator == 'neq' and current == value:
            return False
        if operator == 'in' and current not in value:
            return False
        if operator == 'is' and current is not value:
            return False
        if operator == 'ilike' and not _ilike(value, current):
            return False
        if operator in ('gt', 'gte', 'lt', 'lte'):
            if current is None:
                return False
            if operator == 'gt' and not current > value:
                return False
            if operator == 'gte' and not current >= value:
                return False
            if operator == 'lt' and not current < value:
                return False
            if operator == 'lte' and not current <= value:
                return False
    return True


def _sort_value(value: Any) -> tuple[bool, Any]:
    # Nulls sort first ascending, last descending
    return (value is not None, value if value is not None else 0)


def _project(row: dict[str, Any], columns: str) -> dict[str, Any]:
    row = copy.deepcopy(row)
    if columns.strip() == '*':
        return row
    wanted = [column.strip() for column in columns.split(',') if column.strip()]
    return {column: row.get(column) for column in wanted}


class InMemoryStore:
    """
    Tables are plain lists of dicts. ``fail(table, op)`` makes the next
    matching operations raise StoreAPIError, mimicking a store outage or
    a policy rejection.
    """

    def __init__(self, tables: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, str], StoreAPIError] = {}
        self.calls: list[tuple[str, str]] = []
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)
        for table, rows in (tables or {}).items():
            for row in rows:
                self._store_row(table, dict(row))

    # ---- Test controls ----
    def fail(self, table: str, op: str, error: StoreAPIError | None = None) -> None:
        self.failures[(table, op)] = error or StoreAPIError(f"Store request on '{table}' failed", status_code=500)

    def rows(self, table: str, **filters: Any) -> list[dict[str, Any]]:
        return [copy.deepcopy(row) for row in self.tables.get(table, []) if _matches(row, filters)]

    def _check(self, table: str, op: str) -> None:
        self.calls.append((table, op))
        error = self.failures.get((table, op))
        if error is not None:
            raise error

    def _store_row(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        row.setdefault('id', f'{table}-{next(self._ids)}')
        row.setdefault('created_at', _BASE_TIME + timedelta(seconds=next(self._clock)))
        self._check_unique(table, row)
        self.tables.setdefault(table, []).append(row)
        return row

    def _check_unique(self, table: str, row: dict[str, Any]) -> None:
        key = UNIQUE_KEYS.get(table)
        if not key:
            return
        for existing in self.tables.get(table, []):
            if all(existing.get(column) == row.get(column) for column in key):
                raise StoreAPIError(
                    f"Store request on '{table}' failed: duplicate key value violates unique constraint",
                    status_code=HTTP_CONFLICT,
                    code=PG_UNIQUE_VIOLATION,
                )

    # ===============================================================================
    # READ OPERATIONS
    # ===============================================================================

    def select(self, table: str, columns: str = '*', filters: dict[str, Any] | None = None,
               order: Any = None, limit: int | None = None) -> list[dict[str, Any]]:
        self._check(table, 'select')
        rows = [row for row in self.tables.get(table, []) if _matches(row, filters)]
        for column, direction in reversed(list(order or [])):
            rows = sorted(
                rows,
                key=lambda row, column=column: _sort_value(row.get(column)),
                reverse=direction == 'desc',
            )
        if limit is not None:
            rows = rows[:limit]
        return [_project(row, columns) for row in rows]

    def select_one(self, table: str, columns: str = '*', filters: dict[str, Any] | None = None) -> dict | None:
        rows = self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        self._check(table, 'count')
        return sum(1 for row in self.tables.get(table, []) if _matches(row, filters))

    # ===============================================================================
    # WRITE OPERATIONS
    # ===============================================================================

    def insert(self, table: str, rows: Any) -> list[dict[str, Any]]:
        self._check(table, 'insert')
        batch = rows if isinstance(rows, list) else [rows]
        stored = [self._store_row(table, copy.deepcopy(row)) for row in batch]
        return [copy.deepcopy(row) for row in stored]

    def update(self, table: str, values: dict[str, Any], filters: dict[str, Any]) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("Refusing to update without filters")
        self._check(table, 'update')
        updated = []
        for row in self.tables.get(table, []):
            if _matches(row, filters):
                row.update(copy.deepcopy(values))
                row['updated_at'] = _BASE_TIME + timedelta(seconds=next(self._clock))
                updated.append(copy.deepcopy(row))
        return updated

    def upsert(self, table: str, rows: Any, on_conflict: str) -> list[dict[str, Any]]:
        self._check(table, 'upsert')
        key = [column.strip() for column in on_conflict.split(',')]
        batch = rows if isinstance(rows, list) else [rows]
        result = []
        for row in batch:
            existing = next(
                (current for current in self.tables.get(table, [])
                 if all(current.get(column) == row.get(column) for column in key)),
                None,
            )
            if existing is None:
                existing = self._store_row(table, copy.deepcopy(row))
            else:
                existing.update(copy.deepcopy(row))
            result.append(copy.deepcopy(existing))
        return result

    def delete(self, table: str, filters: dict[str, Any]) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("Refusing to delete without filters")
        self._check(table, 'delete')
        kept, removed = [], []
        for row in self.tables.get(table, []):
            (removed if _matches(row, filters) else kept).append(row)
        self.tables[table] = kept
        return removed


# ===============================================================================
# SESSION HELPERS
# ===============================================================================

def make_session_state(user_id: str = 'user-1', email: str = 'shopper@example.com', is_admin: bool = False,
                       full_name: str = 'Asha Shopper', expires_in: int = 3600) -> StorefrontSession:
    return StorefrontSession(
        user_id=user_id,
        email=email,
        access_token=f'access-{user_id}',
        refresh_token=f'refresh-{user_id}',
        expires_at=int(time.time()) + expires_in,
        is_admin=is_admin,
        full_name=full_name,
    )


def product_row(product_id: str, name: str, price: str, **extra: Any) -> dict[str, Any]:
    row = {
        'id': product_id,
        'name': name,
        'price': price,
        'inventory_count': 10,
        'images': [f'https://cdn.example.com/{product_id}.jpg'],
        'is_active': True,
        'description': f'{name} description',
        'category_id': None,
    }
    row.update(extra)
    return row


def sign_in_client(client: Any, state: StorefrontSession) -> None:
    """Put a storefront session into a django.test.Client's session"""
    from apps.users.services import SESSION_KEY

    session = client.session
    session[SESSION_KEY] = state.to_dict()
    session.save()
