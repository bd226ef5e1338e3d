"""
Shared fixtures.

``backend`` fakes the aggregation service behind an
``httpx.MockTransport``: register canned envelopes with ``backend.on()``
and hand ``backend.client()`` to whatever needs a ``BackendClient``.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest

from smart_widgets.core.config import Settings
from smart_widgets.models.columns import ColumnInfo, TableInfo
from smart_widgets.models.widget import (
    AxisChartSettings,
    ListSettings,
    StatSettings,
    WidgetConfig,
)
from smart_widgets.services.broker.backend_client import BackendClient
from smart_widgets.services.widgets.base import DisplayContext

BASE_URL = "http://backend.test"
PREFIX = "/api/v1/smart-widgets/"

Payload = Union[Dict[str, Any], List[Any], None, Callable[[httpx.Request], Any]]


class FakeBackend:
    """Route table keyed by ``(method, path)`` with the prefix stripped."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Tuple[int, Payload]] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, path: str, payload: Payload = None, status: int = 200) -> None:
        self.routes[(method, path)] = (status, payload)

    def ok(self, method: str, path: str, data: Any) -> None:
        self.on(method, path, {"success": True, "data": data})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith(PREFIX):
            path = path[len(PREFIX):]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"success": False, "message": "no route"})
        status, payload = route
        if callable(payload):
            payload = payload(request)
        if isinstance(payload, Exception):
            raise payload
        return httpx.Response(status, json=payload)

    def bodies(self, method: str, path: str) -> List[Any]:
        """JSON bodies of every recorded request to ``(method, path)``."""
        return [
            json.loads(r.content) if r.content else None
            for r in self.requests
            if r.method == method and r.url.path == PREFIX + path
        ]

    def client(self, **overrides: Any) -> BackendClient:
        config = Settings(BACKEND_BASE_URL=BASE_URL, **overrides)
        return BackendClient(config=config, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def display() -> DisplayContext:
    return DisplayContext(now=datetime(2024, 6, 1, 12, 0, 0))


@pytest.fixture
def sale_columns() -> List[ColumnInfo]:
    return [
        ColumnInfo(name="name", label="Order Reference", data_type="varchar(64)"),
        ColumnInfo(name="state", label="Status", data_type="varchar(16)"),
        ColumnInfo(name="amount_total", label="Total", data_type="decimal(12,2)"),
        ColumnInfo(name="qty", label="Quantity", data_type="int"),
        ColumnInfo(name="date_order", label="Order Date", data_type="datetime"),
        ColumnInfo(name="create_date", label="Created on", data_type="varchar(32)"),
    ]


@pytest.fixture
def sale_tables() -> List[TableInfo]:
    return [
        TableInfo(table_name="sale_order", display_name="Sales Orders"),
        TableInfo(table_name="stock_picking", display_name="Transfers"),
    ]


@pytest.fixture
def bar_widget() -> WidgetConfig:
    return WidgetConfig(
        id="w-7",
        type="bar",
        title="Orders by Status",
        data_source="sale_order",
        settings=AxisChartSettings(x_axis_key="state", y_axis_key="value"),
    )


@pytest.fixture
def sum_stat() -> WidgetConfig:
    return WidgetConfig(
        id="w-3",
        type="stat",
        title="Revenue",
        data_source="sale_order",
        settings=StatSettings(calculation_type="sum", y_axis_key="amount_total"),
    )


@pytest.fixture
def list_widget() -> WidgetConfig:
    return WidgetConfig(
        id="w-9",
        type="list",
        title="Orders",
        data_source="sale_order",
        settings=ListSettings(data_keys=("name", "state")),
    )
