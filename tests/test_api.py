import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from smart_widgets.api.v1.dependencies import (
    get_client,
    get_column_cache,
    get_dashboard,
    get_simulations,
)
from smart_widgets.core.cache import ColumnCache
from smart_widgets.main import create_fastapi_app
from smart_widgets.services.orchestrator.dashboard import DashboardService
from smart_widgets.services.simulation.session import SimulationRegistry

STORED_WIDGETS = [
    {"id": 3, "widget_type": "stat", "title": "Revenue", "source_table": "sale_order",
     "config": {"calculationType": "sum", "yAxisKey": "amount_total"}},
    {"id": 7, "widget_type": "bar", "title": "Orders by Status", "source_table": "sale_order",
     "config": {"xAxisKey": "state", "yAxisKey": "value"}},
]


@pytest.fixture
def api(backend, display):
    """TestClient wired to a fake backend and fresh per-test services."""
    client = backend.client()
    dashboard = DashboardService(client=client, ctx=display)
    cache = ColumnCache()
    simulations = SimulationRegistry()

    app = create_fastapi_app()
    app.dependency_overrides[get_client] = lambda: client
    app.dependency_overrides[get_dashboard] = lambda: dashboard
    app.dependency_overrides[get_column_cache] = lambda: cache
    app.dependency_overrides[get_simulations] = lambda: simulations

    backend.ok("GET", "tables", [
        {"table_name": "sale_order", "display_name": "Sales Orders"},
        {"table_name": "stock_picking", "display_name": "Transfers"},
    ])
    backend.ok("GET", "tables/sale_order/columns", [
        {"name": "state", "label": "Status", "type": "varchar(16)"},
        {"name": "amount_total", "label": "Total", "type": "decimal(12,2)"},
        {"name": "date_order", "label": "Order Date", "type": "datetime"},
    ])
    return SimpleNamespace(http=TestClient(app), dashboard=dashboard, backend=backend)


@pytest.fixture
def loaded(api):
    api.backend.ok("GET", "widgets", STORED_WIDGETS)
    assert api.http.get("/api/v1/widgets", params={"reload": "true"}).status_code == 200
    return api


def serve_preview(backend):
    def preview(request):
        config = json.loads(request.content)["config"]
        if config["widgetType"] == "stat":
            return {"success": True, "data": [{"amount_total": 1200}]}
        return {"success": True, "data": [
            {"state": "draft", "value": 3},
            {"state": "done", "value": 5},
        ]}

    backend.on("POST", "widgets/preview", preview)


# ── System ───────────────────────────────────────────────────────

def test_health(api):
    body = api.http.get("/api/v1/system/health").json()
    assert body["status"] == "ok"
    assert body["widget_count"] == 0
    assert body["column_cache"] == {"table": None}


def test_kinds_catalog(api):
    kinds = api.http.get("/api/v1/system/kinds").json()["kinds"]
    by_kind = {k["kind"]: k for k in kinds}
    assert len(kinds) == 12
    assert by_kind["scatter"]["simulatable"] is True
    assert by_kind["list"]["simulatable"] is False


def test_feed_operations(api):
    operations = api.http.get("/api/v1/system/feeds").json()["operations"]
    assert "suppliers" in [op["key"] for op in operations]


# ── Tables ───────────────────────────────────────────────────────

def test_table_search(api):
    body = api.http.get("/api/v1/tables", params={"search": "TRANS"}).json()
    assert body == {
        "total": 1,
        "tables": [{"table_name": "stock_picking", "display_name": "Transfers"}],
    }


def test_columns_are_classified_and_cached(api):
    first = api.http.get("/api/v1/tables/sale_order/columns").json()
    api.http.get("/api/v1/tables/sale_order/columns")

    assert first["classification"] == {
        "numeric": ["amount_total"],
        "date_like": ["date_order"],
        "other": ["state", "amount_total"],
    }
    column_calls = [r for r in api.backend.requests if r.url.path.endswith("/columns")]
    assert len(column_calls) == 1


def test_columns_backend_failure_is_502(api):
    assert api.http.get("/api/v1/tables/missing/columns").status_code == 502


def test_field_options(api):
    body = api.http.get("/api/v1/tables/sale_order/fields", params={"kind": "bar"}).json()
    assert body["fields"] == {"x": ["state", "amount_total"], "y": ["amount_total"]}


def test_field_options_unknown_kind(api):
    response = api.http.get("/api/v1/tables/sale_order/fields", params={"kind": "gauge"})
    assert response.status_code == 400


# ── Widgets ──────────────────────────────────────────────────────

def test_list_uses_encoded_stat_tag(loaded):
    body = loaded.http.get("/api/v1/widgets").json()
    assert body["total"] == 2
    assert [w["type"] for w in body["widgets"]] == ["statcard-sum", "bar"]


def test_create_from_draft(api):
    draft = {"type": "bar", "dataSource": "sale_order", "settings": {"xAxisKey": "state"}}

    response = api.http.post("/api/v1/widgets", json=draft)

    assert response.status_code == 201
    body = response.json()
    assert body["type"] == "bar"
    assert body["title"] == "Count by Status"
    assert body["settings"]["xAxisKey"] == "state"
    assert len(api.dashboard.widgets) == 1


def test_create_without_table_is_422(api):
    response = api.http.post("/api/v1/widgets", json={"type": "bar"})
    assert response.status_code == 422
    assert response.json()["detail"] == ["Select a table"]


def test_create_with_wrong_column_is_400(api):
    draft = {"type": "bar", "dataSource": "sale_order", "settings": {"yAxisKey": "state"}}
    assert api.http.post("/api/v1/widgets", json=draft).status_code == 400


def test_unknown_widget_is_404(api):
    assert api.http.get("/api/v1/widgets/w-99").status_code == 404


def test_delete(loaded):
    response = loaded.http.delete("/api/v1/widgets/w-7")

    assert response.json() == {"status": "removed", "id": "w-7"}
    assert loaded.http.get("/api/v1/widgets/w-7").status_code == 404


def test_stat_edit(loaded):
    loaded.backend.ok("PUT", "widgets/3", {"id": 3})

    response = loaded.http.put(
        "/api/v1/widgets/w-3/stat",
        json={"dataSource": "sale_order", "calculationType": "count", "valueKey": "amount_total"},
    )

    body = response.json()
    assert body["type"] == "statcard-count"
    assert body["title"] == "Total Sales Orders"
    assert "yAxisKey" not in body["settings"]


def test_stat_edit_on_chart_is_400(loaded):
    response = loaded.http.put("/api/v1/widgets/w-7/stat", json={"dataSource": "sale_order"})
    assert response.status_code == 400


def test_render_one(loaded):
    serve_preview(loaded.backend)

    body = loaded.http.post("/api/v1/widgets/w-7/render", params={"time_range": "7d"}).json()

    assert body["metadata"]["state"] == "ok"
    assert body["data"]["labels"] == ["draft", "done"]


def test_render_page(loaded):
    serve_preview(loaded.backend)

    body = loaded.http.get("/api/v1/widgets/render").json()

    assert list(body["widgets"]) == ["w-7"]
    assert body["stats"]["w-3"]["value"] == "$1,200"


def test_stat_summary(loaded):
    serve_preview(loaded.backend)

    body = loaded.http.get("/api/v1/stats/summary", params={"time_range": "30d"}).json()

    assert body["time_range"] == "30d"
    assert body["stats"]["w-3"]["label"] == "Revenue"
    assert body["stats"]["w-3"]["icon"] == "DollarSign"


# ── Simulation ───────────────────────────────────────────────────

def test_simulation_lifecycle(loaded):
    serve_preview(loaded.backend)
    url = "/api/v1/simulations/w-7"

    opened = loaded.http.post(url).json()
    assert opened["fields"][0] == {"index": 0, "label": "draft", "fields": {"value": 3}}

    edited = loaded.http.patch(url, json={"row_index": 0, "field": "value", "value": "abc"}).json()
    assert edited["applied"] is True
    assert edited["result"]["data"]["datasets"][0]["data"] == [0.0, 5.0]
    assert edited["result"]["metadata"]["simulated"] is True

    ignored = loaded.http.patch(url, json={"row_index": 9, "field": "value", "value": 1}).json()
    assert ignored["applied"] is False

    assert loaded.http.delete(url).json() == {"closed": True, "widget_id": "w-7"}
    assert loaded.http.get(url).status_code == 409


def test_simulation_only_for_charts(loaded):
    assert loaded.http.post("/api/v1/simulations/w-3").status_code == 409


def test_simulation_fetch_failure_is_502(loaded):
    assert loaded.http.post("/api/v1/simulations/w-7").status_code == 502
