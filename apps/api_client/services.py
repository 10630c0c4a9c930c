"""
Hosted Store API Client (Storefront → managed Postgres REST interface)

Guidelines for all requests:
- Every call is table-scoped and goes through /rest/v1/<table>.
- Requests carry the project 'apikey' header and a bearer token. When a
  signed-in user's access token is supplied it is used, so row-level access
  policies apply to that identity; otherwise the anonymous key is used.
- The store is the source of truth. Callers re-fetch after mutations instead
  of patching local copies.
"""

# ===============================================================================
# STORE API CLIENT SERVICE - STOREFRONT TO HOSTED STORE COMMUNICATION 🔗
# ===============================================================================

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

import requests
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

from apps.common.types import StoreRow

# HTTP status code constants
HTTP_OK = 200
HTTP_NO_CONTENT = 204
HTTP_MULTIPLE_CHOICES = 300
HTTP_CONFLICT = 409

# Postgres error code for unique constraint violations
PG_UNIQUE_VIOLATION = '23505'

FILTER_OPERATORS = frozenset({'eq', 'neq', 'gt', 'gte', 'lt', 'lte', 'in', 'ilike', 'is'})

logger = logging.getLogger(__name__)

# Filters map a column to either a plain value (equality) or an
# (operator, value) pair, e.g. {'status': ('in', ['shipped', 'delivered'])}
Filters = Mapping[str, Any]
Ordering = Iterable[tuple[str, str]]


class StoreAPIError(Exception):
    """Exception raised when hosted store calls fail"""
    def __init__(self, message: str, status_code: int | None = None, code: str | None = None,
                 details: dict | None = None):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        super().__init__(message)

    @property
    def is_unique_violation(self) -> bool:
        """True when the store rejected a write on a uniqueness constraint"""
        return self.code == PG_UNIQUE_VIOLATION or self.status_code == HTTP_CONFLICT


class StoreDataError(ValueError):
    """Raised when a row returned by the store does not match the expected shape"""


def _format_value(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _quote_list_item(value: Any) -> str:
    text = _format_value(value)
    if any(char in text for char in ',()"'):
        escaped = text.replace('"', '\\"')
        return f'"{escaped}"'
    return text


def build_filter_params(filters: Filters | None) -> list[tuple[str, str]]:
    """Encode column filters into store query parameters"""
    params: list[tuple[str, str]] = []
    for column, condition in (filters or {}).items():
        if isinstance(condition, tuple):
            operator, value = condition
        else:
            operator, value = ('is', None) if condition is None else ('eq', condition)

        if operator not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {operator}")

        if operator == 'in':
            encoded = '(' + ','.join(_quote_list_item(item) for item in value) + ')'
        else:
            encoded = _format_value(value)
        params.append((column, f'{operator}.{encoded}'))
    return params


def build_order_param(order: Ordering | None) -> list[tuple[str, str]]:
    if not order:
        return []
    parts = []
    for column, direction in order:
        if direction not in ('asc', 'desc'):
            raise ValueError(f"Unsupported sort direction: {direction}")
        parts.append(f'{column}.{direction}')
    return [('order', ','.join(parts))]


class StoreClient:
    """
    Table-scoped client for the hosted relational store.

    Handles:
    - Project key + bearer token authentication
    - Filter/order/limit encoding
    - Error mapping to StoreAPIError
    """

    def __init__(self, access_token: str | None = None) -> None:
        self.base_url = settings.STORE_API_URL
        self.api_key = settings.STORE_API_KEY
        self.timeout = settings.STORE_API_TIMEOUT
        self.access_token = access_token

    # ---- Small helpers to reduce branching in _make_request ----
    def _build_url(self, table: str) -> str:
        return f"{self.base_url.rstrip('/')}/rest/v1/{table.lstrip('/')}"

    def _build_headers(self, prefer: list[str] | None = None) -> dict[str, str]:
        headers = {
            'apikey': self.api_key or '',
            'Authorization': f'Bearer {self.access_token or self.api_key or ""}',
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        if prefer:
            headers['Prefer'] = ','.join(prefer)
        return headers

    def _handle_api_response(self, response: requests.Response, table: str) -> Any:
        if HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            if response.status_code == HTTP_NO_CONTENT or not response.content:
                return []
            try:
                return response.json()
            except ValueError:
                return []

        try:
            error_data = response.json()
        except ValueError:
            error_data = {'message': 'Invalid response format'}

        raise StoreAPIError(
            message=f"Store request on '{table}' failed: {error_data.get('message', 'Unknown error')}",
            status_code=response.status_code,
            code=error_data.get('code'),
            details=error_data,
        )

    def _send(self, method: str, table: str, params: list[tuple[str, str]] | None = None,
              data: Any = None, prefer: list[str] | None = None) -> requests.Response:
        url = self._build_url(table)
        body = json.dumps(data, cls=DjangoJSONEncoder).encode('utf-8') if data is not None else None

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=self._build_headers(prefer),
                params=params or None,
                data=body,
                timeout=self.timeout,
            )
            logger.debug(f"🌐 [Store] {method} {table} -> {response.status_code}")
            return response

        except requests.exceptions.ConnectionError as e:
            logger.error(f"🔥 [Store] Connection failed to hosted store: {url}")
            raise StoreAPIError("Store service unavailable") from e
        except requests.exceptions.Timeout as e:
            logger.error(f"🔥 [Store] Timeout connecting to hosted store: {url}")
            raise StoreAPIError("Store service timeout") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"🔥 [Store] Request error: {e}")
            raise StoreAPIError(f"Request failed: {e!s}") from e

    def _make_request(self, method: str, table: str, params: list[tuple[str, str]] | None = None,
                      data: Any = None, prefer: list[str] | None = None) -> list[StoreRow]:
        response = self._send(method, table, params=params, data=data, prefer=prefer)
        result = self._handle_api_response(response, table)
        if isinstance(result, dict):
            return [result]
        return result

    # ===============================================================================
    # READ OPERATIONS
    # ===============================================================================

    def select(self, table: str, columns: str = '*', filters: Filters | None = None,
               order: Ordering | None = None, limit: int | None = None) -> list[StoreRow]:
        """Select rows matching all filters"""
        params = [('select', columns), *build_filter_params(filters), *build_order_param(order)]
        if limit is not None:
            params.append(('limit', str(limit)))
        return self._make_request('GET', table, params=params)

    def select_one(self, table: str, columns: str = '*', filters: Filters | None = None) -> StoreRow | None:
        """Select at most one row; None when nothing matches"""
        rows = self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    def count(self, table: str, filters: Filters | None = None) -> int:
        """Exact row count using the Content-Range header"""
        params = [('select', '*'), *build_filter_params(filters)]
        response = self._send('HEAD', table, params=params, prefer=['count=exact'])
        self._handle_api_response(response, table)

        content_range = response.headers.get('Content-Range', '')
        _, _, total = content_range.partition('/')
        try:
            return int(total)
        except ValueError:
            logger.warning(f"⚠️ [Store] Missing count for '{table}': {content_range!r}")
            return 0

    # ===============================================================================
    # WRITE OPERATIONS
    # ===============================================================================

    def insert(self, table: str, rows: StoreRow | list[StoreRow]) -> list[StoreRow]:
        """Insert one or more rows and return them as stored"""
        return self._make_request('POST', table, data=rows, prefer=['return=representation'])

    def update(self, table: str, values: StoreRow, filters: Filters) -> list[StoreRow]:
        """Update rows matching filters; an empty filter set is refused"""
        if not filters:
            raise ValueError("Refusing to update without filters")
        return self._make_request(
            'PATCH', table, params=build_filter_params(filters), data=values,
            prefer=['return=representation'],
        )

    def upsert(self, table: str, rows: StoreRow | list[StoreRow], on_conflict: str) -> list[StoreRow]:
        """Insert or update keyed by the declared uniqueness constraint"""
        return self._make_request(
            'POST', table, params=[('on_conflict', on_conflict)], data=rows,
            prefer=['resolution=merge-duplicates', 'return=representation'],
        )

    def delete(self, table: str, filters: Filters) -> list[StoreRow]:
        """Delete rows matching filters; an empty filter set is refused"""
        if not filters:
            raise ValueError("Refusing to delete without filters")
        return self._make_request(
            'DELETE', table, params=build_filter_params(filters), prefer=['return=representation'],
        )
