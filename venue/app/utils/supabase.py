"""
venue/app/utils/supabase.py

HTTP client for the venue database (Supabase PostgREST).

    RPC:    POST {url}/rest/v1/rpc/{fn}        json = params
    Tables: GET/POST/DELETE {url}/rest/v1/{table}?col=op.value

All business rules (pricing, triggers, audit) live in the database;
this client only moves JSON back and forth.
"""

import logging
from typing import Any, Iterable, Optional

import httpx

from ..config import settings
from ..errors import SupabaseError

logger = logging.getLogger(__name__)

# (column, operator, value) → column=operator.value
Filter = tuple[str, str, Any]


def _filter_params(filters: Iterable[Filter]) -> list[tuple[str, str]]:
    params = []
    for column, op, value in filters:
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif value is None:
            value = "null"
        params.append((column, f"{op}.{value}"))
    return params


class SupabaseClient:
    """Async client for PostgREST RPC and table calls."""

    def __init__(
        self,
        base_url: str = settings.supabase_url,
        api_key: str = settings.supabase_anon_key,
        timeout: float = settings.http_timeout,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def _headers(self, extra: Optional[dict] = None) -> dict:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        headers: dict = None,
        **kwargs
    ) -> Optional[dict | list]:
        """Base HTTP request. Raises SupabaseError on transport or HTTP errors."""
        url = f"{self.base_url}/rest/v1{path}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                resp = await client.request(method, url, headers=self._headers(headers), **kwargs)
            except httpx.HTTPError as e:
                logger.error(f"Supabase request failed: {method} {path} -> {e}")
                raise SupabaseError(f"Network error: {e}") from e

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = resp.text
            error = SupabaseError.from_response(resp.status_code, body)
            logger.error(
                f"Supabase error: {method} {path} -> {resp.status_code} "
                f"code={error.code} message={error.message}"
            )
            raise error

        if resp.status_code == 204 or not resp.content:
            return None

        return resp.json()

    # ------------------------------------------------------------------
    # RPC
    # ------------------------------------------------------------------

    async def rpc(self, fn: str, params: Optional[dict] = None) -> Any:
        """POST /rpc/{fn}"""
        logger.debug(f"RPC {fn} {params}")
        return await self._request("POST", f"/rpc/{fn}", json=params or {})

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Iterable[Filter] = (),
        order: Optional[str] = None,
    ) -> list[dict]:
        """GET /{table}?select=...&col=op.value"""
        params = [("select", columns), *_filter_params(filters)]
        if order:
            params.append(("order", order))
        result = await self._request("GET", f"/{table}", params=params)
        return result or []

    async def insert(self, table: str, row: dict) -> Optional[dict]:
        """POST /{table} → inserted row."""
        result = await self._request(
            "POST",
            f"/{table}",
            json=[row],
            headers={"Prefer": "return=representation"},
        )
        if isinstance(result, list):
            return result[0] if result else None
        return result

    async def delete(self, table: str, filters: Iterable[Filter]) -> list[dict]:
        """DELETE /{table}?col=op.value → deleted rows."""
        result = await self._request(
            "DELETE",
            f"/{table}",
            params=_filter_params(filters),
            headers={"Prefer": "return=representation"},
        )
        return result or []
