"""PostgREST store over HTTP."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
from pydantic_core import to_jsonable_python

from ..errors import ZERO_ROWS, StoreError, TransientStoreError
from ..query.expressions import PostgrestExpressionBuilder, PostgrestQuery
from ..query.filters import FilterCondition, FilterConfig, apply_filters
from ..query.pagination import PageRange
from ..results import Err, Ok, Result
from .base import Order, Row

logger = logging.getLogger(__name__)

SINGLE_OBJECT = "application/vnd.pgrst.object+json"


def _parse_content_range(header: str | None) -> int | None:
    """``0-19/57`` -> 57. ``*`` totals are unknown."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


class RestStore:
    """Talks to a PostgREST endpoint (``/rest/v1``) with an API key.

    Usage:
        async with RestStore(url, key) as store:
            result = await store.select("rooms", page=PageRange(0, 19), count=True)
    """

    def __init__(
        self,
        url: str,
        key: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.url = url.rstrip("/")
        self._builder = PostgrestExpressionBuilder()
        self._client = client or httpx.AsyncClient(
            base_url=f"{self.url}/rest/v1",
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()

    def _params(self, filters: Sequence[FilterConfig]) -> PostgrestQuery:
        query = PostgrestQuery()
        for config in filters:
            query = apply_filters(query, config, self._builder)
        return query

    def _conditions(self, conditions: Sequence[FilterCondition]) -> PostgrestQuery:
        return self._params([FilterConfig(conditions=conditions)])

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Sequence[tuple[str, str]] = (),
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response | StoreError:
        """Make a request; failures come back as a ``StoreError`` value."""
        body = to_jsonable_python(json) if json is not None else None
        try:
            response = await self._client.request(
                method, path, params=list(params), json=body, headers=headers
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            return TransientStoreError(f"Request failed: {e}", code="NETWORK_ERROR", details=e)

        if response.is_success:
            return response

        payload: dict[str, Any] = {}
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = {"message": response.text}
        code = payload.get("code") or f"HTTP_{response.status_code}"
        message = payload.get("message") or f"API error: {response.status_code}"
        cls = TransientStoreError if response.status_code >= 500 else StoreError
        return cls(message, code=code, details=payload)

    async def select(
        self,
        table: str,
        *,
        filters: Sequence[FilterConfig] = (),
        page: PageRange | None = None,
        order: Order = (),
        count: bool = False,
    ) -> Result[list[Row]]:
        query = self._params(filters).with_param("select", "*")
        if order:
            query = query.with_param(
                "order",
                ",".join(f"{col}.{'asc' if asc else 'desc'}" for col, asc in order),
            )
        headers = {}
        if page is not None:
            headers["Range-Unit"] = "items"
            headers["Range"] = f"{page.start}-{page.end}"
        if count:
            headers["Prefer"] = "count=exact"

        response = await self._request("GET", f"/{table}", params=query.params, headers=headers)
        if isinstance(response, StoreError):
            return Err(response)
        total = _parse_content_range(response.headers.get("content-range")) if count else None
        return Ok(response.json(), count=total)

    async def select_one(self, table: str, conditions: Sequence[FilterCondition]) -> Result[Row]:
        query = self._conditions(conditions).with_param("select", "*")
        response = await self._request(
            "GET", f"/{table}", params=query.params, headers={"Accept": SINGLE_OBJECT}
        )
        if isinstance(response, StoreError):
            if response.code == "HTTP_406":
                response.code = ZERO_ROWS
            return Err(response)
        return Ok(response.json())

    async def insert(self, table: str, payload: Row) -> Result[list[Row]]:
        response = await self._request(
            "POST", f"/{table}", json=payload, headers={"Prefer": "return=representation"}
        )
        if isinstance(response, StoreError):
            return Err(response)
        return Ok(response.json())

    async def update(
        self, table: str, conditions: Sequence[FilterCondition], payload: Row
    ) -> Result[list[Row]]:
        query = self._conditions(conditions)
        response = await self._request(
            "PATCH",
            f"/{table}",
            params=query.params,
            json=payload,
            headers={"Prefer": "return=representation"},
        )
        if isinstance(response, StoreError):
            return Err(response)
        return Ok(response.json())

    async def delete(self, table: str, conditions: Sequence[FilterCondition]) -> Result[list[Row]]:
        query = self._conditions(conditions)
        response = await self._request(
            "DELETE", f"/{table}", params=query.params, headers={"Prefer": "return=representation"}
        )
        if isinstance(response, StoreError):
            return Err(response)
        return Ok(response.json())

    async def rpc(self, name: str, params: dict[str, Any] | None = None) -> Result[Any]:
        response = await self._request("POST", f"/rpc/{name}", json=params or {})
        if isinstance(response, StoreError):
            return Err(response)
        return Ok(response.json() if response.content else None)
