"""PostgREST (Supabase REST) implementation of the Remote Data Gateway"""

import enum
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import httpx

from loanlight_admin.config import settings
from loanlight_admin.domain.exceptions import GatewayError, GatewayTimeoutError, NotFoundError
from loanlight_admin.infrastructure.clients.gateway import Filter, Query, Row
from loanlight_admin.infrastructure.observability.metrics import gateway_latency_histogram

_RESERVED = set(',()"')


def encode_value(value: Any) -> str:
    """Render a filter value the way PostgREST expects it in a query string"""
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _encode_list_item(value: Any) -> str:
    text = encode_value(value)
    if any(ch in _RESERVED for ch in text):
        return '"' + text.replace('"', '\\"') + '"'
    return text


def encode_filter(item: Filter) -> str:
    if item.op == "in":
        return "in.(" + ",".join(_encode_list_item(v) for v in item.value) + ")"
    if item.op == "eq" and item.value is None:
        return "is.null"
    return f"{item.op}.{encode_value(item.value)}"


def build_params(query: Query) -> List[tuple]:
    """Translate a Query into PostgREST query-string parameters"""
    params = [("select", ",".join(query.columns) if query.columns else "*")]
    params += [(f.column, encode_filter(f)) for f in query.filters]
    if query.order_by:
        params.append(("order", f"{query.order_by}.{'desc' if query.descending else 'asc'}"))
    if query.max_rows is not None:
        params.append(("limit", str(query.max_rows)))
    return params


def parse_content_range(header: Optional[str]) -> int:
    """Total row count from a Content-Range header, e.g. 0-24/573"""
    if not header or "/" not in header:
        raise GatewayError(f"Missing count in Content-Range header: {header!r}")
    total = header.rsplit("/", 1)[1]
    if total == "*":
        raise GatewayError("Backend did not return an exact count")
    return int(total)


def _jsonable(values: Row) -> Dict[str, Any]:
    payload = {}
    for key, value in values.items():
        if isinstance(value, enum.Enum):
            value = value.value
        elif isinstance(value, (datetime, date)):
            value = value.isoformat()
        payload[key] = value
    return payload


class RestGateway:
    """Client for the hosted backend's REST endpoint"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_key
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def _headers(self, **extra: str) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: List[tuple] | None = None,
        json: Any = None,
        headers: Dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Issue one request against /rest/v1/<table>.

        Raises:
            GatewayTimeoutError: when the backend does not answer within `timeout`
            GatewayError: on HTTP errors and network failures
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                with gateway_latency_histogram.labels(operation=method, table=table).time():
                    response = await client.request(
                        method,
                        f"{self.base_url}/rest/v1/{table}",
                        params=params,
                        json=json,
                        headers=headers or self._headers(),
                    )
                response.raise_for_status()
                return response

            except httpx.TimeoutException as e:
                raise GatewayTimeoutError(f"Backend timeout after {self.timeout}s ({method} {table})") from e
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                raise GatewayError(f"Backend error {status} on {method} {table}: {_error_message(e.response)}") from e
            except httpx.RequestError as e:
                raise GatewayError(f"Backend unreachable ({method} {table}): {e}") from e

    async def select(self, query: Query) -> List[Row]:
        response = await self._request("GET", query.table, params=build_params(query))
        try:
            rows = response.json()
        except ValueError as e:
            raise GatewayError(f"Invalid JSON from backend for {query.table}") from e
        if not isinstance(rows, list):
            raise GatewayError(f"Expected a list of rows for {query.table}")
        return rows

    async def count(self, query: Query) -> int:
        params = [p for p in build_params(query) if p[0] != "select"]
        response = await self._request(
            "HEAD",
            query.table,
            params=params,
            headers=self._headers(Prefer="count=exact"),
        )
        return parse_content_range(response.headers.get("content-range"))

    async def insert(self, table: str, values: Row) -> Row:
        response = await self._request(
            "POST",
            table,
            json=_jsonable(values),
            headers=self._headers(Prefer="return=representation"),
        )
        return _single(response, table)

    async def update(self, table: str, row_id: str, values: Row) -> Row:
        response = await self._request(
            "PATCH",
            table,
            params=[("id", f"eq.{row_id}")],
            json=_jsonable(values),
            headers=self._headers(Prefer="return=representation"),
        )
        # PATCH matching no row succeeds with an empty representation
        return _single(response, table, missing=NotFoundError(f"No {table} row with id {row_id}"))

    async def delete(self, table: str, row_id: str) -> None:
        await self._request("DELETE", table, params=[("id", f"eq.{row_id}")])


def _single(response: httpx.Response, table: str, missing: Optional[GatewayError] = None) -> Row:
    try:
        rows = response.json()
    except ValueError as e:
        raise GatewayError(f"Invalid JSON from backend for {table}") from e
    if not rows:
        raise missing or GatewayError(f"No row returned from {table}")
    return rows[0]


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)
