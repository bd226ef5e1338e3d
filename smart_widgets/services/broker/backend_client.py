"""
BackendClient — Async HTTP wrapper for the aggregation backend.

Single Responsibility: execute one request against the smart-widgets
backend and unwrap its ``{success, data, message}`` envelope.  No
normalization, no caching, no rendering.

Handles:
  - Tenant / session headers from settings.
  - Timeout enforcement.
  - Envelope unwrapping (``success=false`` → ``ok=False``).
  - Structured error handling — never raises; returns result dicts.

Usage::

    from smart_widgets.services.broker.backend_client import backend_client

    result = await backend_client.preview("sale_order", {"widgetType": "bar"})
    # result = {"ok": True, "data": [...], "status": 200, "error": None}
    # or      {"ok": False, "data": None, "status": 0, "error": "Timeout after 15s"}
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from smart_widgets.core.config import Settings, settings as default_settings
from smart_widgets.models.columns import ColumnInfo, TableInfo

logger = logging.getLogger(__name__)

# Reusable result type
APIResult = Dict[str, Any]


class BackendClient:
    """
    Executes async requests against the aggregation backend.

    Stateless — each call creates and destroys its own ``httpx.AsyncClient``.
    Tests inject an ``httpx.MockTransport`` through ``transport``.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or default_settings
        self._transport = transport

    # ─────────────────────────────────────────────────────────
    #  PUBLIC API
    # ─────────────────────────────────────────────────────────

    async def list_tables(self) -> APIResult:
        result = await self._request("GET", "tables")
        if result["ok"]:
            result["data"] = [TableInfo.from_wire(t) for t in result["data"] or []]
        return result

    async def list_columns(self, table: str) -> APIResult:
        result = await self._request("GET", f"tables/{table}/columns")
        if result["ok"]:
            result["data"] = [ColumnInfo.from_wire(c) for c in result["data"] or []]
        return result

    async def fetch_columns(self, table: str) -> List[ColumnInfo]:
        """Column loader for ``ColumnCache``: empty list on failure."""
        result = await self.list_columns(table)
        return result["data"] if result["ok"] else []

    async def preview(self, source_table: str, config: Dict[str, Any]) -> APIResult:
        return await self._request(
            "POST",
            "widgets/preview",
            body={"sourceTable": source_table, "config": config},
        )

    async def list_widgets(self, user_id: Optional[str] = None) -> APIResult:
        uid = user_id or self._config.USER_ID
        params = {"user_id": uid} if uid else None
        return await self._request("GET", "widgets", params=params)

    async def create_widget(self, body: Dict[str, Any]) -> APIResult:
        return await self._request("POST", "widgets", body=body)

    async def update_widget(self, widget_id: str, body: Dict[str, Any]) -> APIResult:
        return await self._request("PUT", f"widgets/{widget_id}", body=body)

    async def delete_widget(self, widget_id: str) -> APIResult:
        return await self._request("DELETE", f"widgets/{widget_id}")

    # ─────────────────────────────────────────────────────────
    #  INTERNAL HELPERS
    # ─────────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> APIResult:
        url = self._config.backend_url(path)
        timeout = self._config.BACKEND_TIMEOUT
        label = f"{method} {path}"

        try:
            async with httpx.AsyncClient(
                timeout=timeout, transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._build_headers(),
                    params=params,
                    json=body,
                )

            if response.status_code >= 400:
                return self._error_result(
                    label,
                    f"HTTP {response.status_code}: {response.text[:200]}",
                    response.status_code,
                )

            return self._unwrap(label, response)

        except httpx.TimeoutException:
            return self._error_result(label, f"Timeout after {timeout}s", 0)
        except httpx.ConnectError as exc:
            return self._error_result(label, f"Connection failed: {exc}", 0)
        except Exception as exc:
            return self._error_result(label, f"Unexpected error: {exc}", 0)

    def _build_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._config.TENANT_ID:
            headers["X-Tenant-ID"] = self._config.TENANT_ID
        if self._config.SESSION_ID:
            headers["X-Session-ID"] = self._config.SESSION_ID
        return headers

    def _unwrap(self, label: str, response: httpx.Response) -> APIResult:
        """Unwrap ``{success, data, message}``; non-envelope JSON passes through."""
        payload = response.json() if response.content else None

        if isinstance(payload, dict) and "success" in payload:
            if not payload.get("success"):
                return self._error_result(
                    label,
                    payload.get("message") or "Request failed",
                    response.status_code,
                )
            data = payload.get("data")
        else:
            data = payload

        return {
            "ok": True,
            "data": data,
            "status": response.status_code,
            "error": None,
        }

    @staticmethod
    def _error_result(label: str, error: str, status: int) -> APIResult:
        """Build a standardized error result dict."""
        logger.error(f"[BackendClient] {label}: {error}")
        return {
            "ok": False,
            "data": None,
            "error": error,
            "status": status,
        }


# ── Singleton ────────────────────────────────────────────────────
backend_client = BackendClient()
