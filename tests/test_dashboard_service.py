import json

import pytest

from smart_widgets.core.errors import WidgetConfigError, WidgetNotFoundError
from smart_widgets.models.widget import StatSettings
from smart_widgets.services.orchestrator.dashboard import DashboardService


@pytest.fixture
def service(backend, display):
    return DashboardService(client=backend.client(), ctx=display)


async def seed(service, *widgets):
    """Add widgets while the backend has no POST route (kept locally)."""
    for widget in widgets:
        await service.add(widget)


# ── Loading ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_load_normalizes_and_skips_unknown_kinds(backend, service):
    backend.ok("GET", "widgets", [
        {"id": 12, "widget_type": "stat", "title": "Orders", "source_table": "sale_order",
         "config": {"calculationType": "count"}},
        {"id": 13, "widget_type": "bar", "title": "By state", "source_table": "sale_order",
         "config": {"xAxisKey": "state"}, "grid_span": 2},
        {"id": 14, "widget_type": "gauge", "title": "?", "source_table": "x"},
    ])

    widgets = await service.load()

    assert [w.id for w in widgets] == ["w-12", "w-13"]
    assert [w.id for w in service.stat_widgets()] == ["w-12"]
    assert [w.id for w in service.grid_widgets()] == ["w-13"]
    assert service.get("w-13").grid_span == 2


@pytest.mark.asyncio
async def test_failed_load_keeps_current_list(backend, service, bar_widget):
    await seed(service, bar_widget)

    assert await service.load() == (bar_widget,)


def test_require_unknown_widget(service):
    with pytest.raises(WidgetNotFoundError):
        service.require("w-404")


# ── Add / remove ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_backend_copy_wins_on_add(backend, service, bar_widget):
    backend.ok("POST", "widgets", {
        "id": 31, "widget_type": "bar", "title": "Orders by Status",
        "source_table": "sale_order", "config": {"xAxisKey": "state", "yAxisKey": "value"},
    })

    stored = await service.add(bar_widget)

    assert stored.id == "w-31"
    assert service.widgets == (stored,)
    body = backend.bodies("POST", "widgets")[0]
    assert body["widget_type"] == "bar"
    assert body["config"]["xAxisKey"] == "state"


@pytest.mark.asyncio
async def test_add_keeps_local_copy_when_backend_fails(service, bar_widget):
    stored = await service.add(bar_widget)

    assert stored is bar_widget
    assert service.widgets == (bar_widget,)


@pytest.mark.asyncio
async def test_remove_drops_locally_even_if_delete_fails(backend, service, bar_widget, sum_stat):
    await seed(service, bar_widget, sum_stat)
    before = service.widgets

    assert await service.remove("w-7") is True

    assert service.widgets == (sum_stat,)
    assert before == (bar_widget, sum_stat)
    assert [r.method for r in backend.requests][-1] == "DELETE"
    assert backend.requests[-1].url.path.endswith("/widgets/7")


@pytest.mark.asyncio
async def test_remove_unsaved_widget_skips_backend(backend, service, bar_widget):
    draft = bar_widget.with_changes(id="w-1a2b3c")
    await seed(service, draft)
    backend.requests.clear()

    assert await service.remove("w-1a2b3c") is True
    assert backend.requests == []
    assert await service.remove("w-1a2b3c") is False


# ── Stat edit ────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_stat_edit_regenerates_blank_title(backend, service, sum_stat):
    backend.ok("PUT", "widgets/3", {"id": 3})
    await seed(service, sum_stat)

    updated = await service.edit_stat(
        "w-3", "  ", "sale_order", "count", value_key="amount_total", table_label="Sales Orders",
    )

    assert updated.title == "Total Sales Orders"
    assert updated.settings == StatSettings(calculation_type="count", y_axis_key=None)
    assert service.get("w-3") == updated
    assert backend.bodies("PUT", "widgets/3") == [{
        "title": "Total Sales Orders",
        "source_table": "sale_order",
        "config": {"calculationType": "count", "filters": []},
    }]


@pytest.mark.asyncio
async def test_stat_edit_keeps_user_title_and_value_field(service, sum_stat):
    draft = sum_stat.with_changes(id="w-local")
    await seed(service, draft)

    updated = await service.edit_stat("w-local", "Peak order", "sale_order", "max", value_key="amount_total")

    assert updated.title == "Peak order"
    assert updated.settings.y_axis_key == "amount_total"
    assert updated.calculation_type == "max"


@pytest.mark.asyncio
async def test_stat_edit_rejects_chart(service, bar_widget):
    await seed(service, bar_widget)
    with pytest.raises(WidgetConfigError):
        await service.edit_stat("w-7", "x", "sale_order", "sum")


# ── Rendering ────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_render_uses_preview_rows(backend, service, bar_widget):
    backend.ok("POST", "widgets/preview", [{"state": "draft", "value": 3}])
    await seed(service, bar_widget)

    result = await service.render("w-7", time_range="7d")

    assert result.state == "ok"
    assert result.data["labels"] == ["draft"]
    assert backend.bodies("POST", "widgets/preview")[0]["config"]["timeRange"] == "7d"


@pytest.mark.asyncio
async def test_fetch_failure_renders_error_state(service, bar_widget):
    await seed(service, bar_widget)

    result = await service.render("w-7")

    assert result.state == "error"
    assert result.message.startswith("Error: ")


@pytest.mark.asyncio
async def test_render_all_splits_grid_and_stat_cards(backend, service, bar_widget, sum_stat):
    def preview(request):
        config = json.loads(request.content)["config"]
        if config["widgetType"] == "stat":
            return {"success": True, "data": [{"amount_total": 900}]}
        return {"success": True, "data": [{"state": "done", "value": 2}]}

    backend.on("POST", "widgets/preview", preview)
    await seed(service, bar_widget, sum_stat)

    page = await service.render_all("30d")

    assert list(page["widgets"]) == ["w-7"]
    assert page["stats"]["w-3"]["value"] == "$900"
    assert page["metadata"]["widget_count"] == 1
    assert page["metadata"]["stat_count"] == 1
    assert page["metadata"]["error_count"] == 0
    assert page["metadata"]["time_range"] == "30d"


@pytest.mark.asyncio
async def test_render_all_counts_states(service, bar_widget, list_widget):
    await seed(service, bar_widget, list_widget)

    page = await service.render_all()

    assert page["metadata"]["error_count"] == 2
    assert page["metadata"]["states"] == {"error": 2}
    assert page["stats"] == {}


@pytest.mark.asyncio
async def test_empty_page(backend, service):
    page = await service.render_all("7d")

    assert page["widgets"] == {}
    assert page["metadata"]["widget_count"] == 0
    assert page["metadata"]["time_range"] == "7d"
    assert backend.requests == []
