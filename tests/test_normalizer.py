import pytest

from smart_widgets.core.errors import WidgetConfigError
from smart_widgets.models.widget import (
    AxisChartSettings,
    FixedFeedSettings,
    ListSettings,
    OperationSettings,
    StatSettings,
    WidgetConfig,
)
from smart_widgets.services.normalizer import (
    backend_widget_id,
    build_preview_request,
    build_stat_summary_request,
    is_persisted_id,
    widget_from_wire,
    widget_to_client,
    widget_to_wire,
    widget_update_payload,
    widgets_from_wire,
)


# ── Inbound ──────────────────────────────────────────────────────

def test_backend_chart_with_legacy_calculation_type():
    widget = widget_from_wire({
        "id": 42,
        "widget_type": "bar",
        "widget_name": "Revenue by Status",
        "source_table": "sale_order",
        "config": {"xAxisKey": "state", "yAxisKey": "amount_total", "calculationType": "sum"},
        "grid_span": 2,
    })

    assert widget.id == "w-42"
    assert widget.title == "Revenue by Status"
    assert widget.grid_span == 2
    assert widget.settings == AxisChartSettings(
        x_axis_key="state", y_axis_key="amount_total", aggregate_type="sum",
    )


def test_aggregate_type_preferred_over_calculation_type():
    widget = widget_from_wire({
        "id": 1, "widget_type": "line", "source_table": "t",
        "config": {"aggregateType": "max", "calculationType": "sum"},
    })
    assert widget.settings.aggregate_type == "max"


def test_backend_stat_reads_calculation_type_from_config():
    widget = widget_from_wire({
        "id": 5, "widget_type": "stat", "title": "Avg order", "source_table": "sale_order",
        "config": {"calculationType": "average", "yAxisKey": "amount_total"},
    })
    assert widget.settings == StatSettings(calculation_type="average", y_axis_key="amount_total")


def test_client_encoded_tag_is_authoritative():
    widget = widget_from_wire({
        "id": "w-abc",
        "type": "statcard-sum",
        "title": "Revenue",
        "dataSource": "sale_order",
        "settings": {"calculationType": "max", "yAxisKey": "amount_total"},
    })
    assert widget.id == "w-abc"
    assert widget.type == "stat"
    assert widget.calculation_type == "sum"


def test_both_shapes_normalize_to_the_same_widget():
    from_backend = widget_from_wire({
        "id": 8, "widget_type": "stat", "title": "Total", "source_table": "sale_order",
        "config": {"calculationType": "sum", "yAxisKey": "amount_total"},
    })
    from_client = widget_from_wire({
        "id": "w-8", "type": "statcard-sum", "title": "Total", "dataSource": "sale_order",
        "settings": {"yAxisKey": "amount_total"},
    })
    assert from_backend == from_client


def test_feed_and_list_settings():
    ops = widget_from_wire({
        "id": 2, "widget_type": "latestOperations", "source_table": "stock_picking",
        "config": {"operationType": "latestTransfers"},
    })
    fixed = widget_from_wire({"id": 3, "widget_type": "lowStock", "source_table": "inventory"})
    listing = widget_from_wire({
        "id": 4, "widget_type": "list", "source_table": "res_partner",
        "config": {"dataKeys": ["name", "email"]},
    })

    assert ops.settings == OperationSettings(operation_type="latestTransfers")
    assert fixed.settings == FixedFeedSettings()
    assert listing.settings == ListSettings(data_keys=("name", "email"))


def test_unknown_type_raises():
    with pytest.raises(WidgetConfigError):
        widget_from_wire({"id": 1, "widget_type": "gauge", "source_table": "t"})


def test_record_without_id_raises():
    with pytest.raises(WidgetConfigError):
        widget_from_wire({"type": "bar", "dataSource": "t"})


def test_list_normalization_skips_bad_records(caplog):
    widgets = widgets_from_wire([
        {"id": 1, "widget_type": "gauge", "source_table": "t"},
        {"id": 2, "widget_type": "pie", "source_table": "t", "config": {"xAxisKey": "state"}},
    ])
    assert [w.id for w in widgets] == ["w-2"]
    assert "Skipping widget 1" in caplog.text


@pytest.mark.parametrize("span", ["wide", [2], {"cols": 2}])
def test_unparseable_grid_span_raises(span):
    with pytest.raises(WidgetConfigError):
        widget_from_wire({"id": 1, "widget_type": "bar", "source_table": "t", "grid_span": span})


def test_list_normalization_skips_bad_grid_span(caplog):
    widgets = widgets_from_wire([
        {"id": 1, "widget_type": "bar", "source_table": "t", "grid_span": "wide"},
        {"id": 2, "widget_type": "bar", "source_table": "t", "grid_span": "2"},
    ])
    assert [(w.id, w.grid_span) for w in widgets] == [("w-2", 2)]
    assert "Skipping widget 1" in caplog.text


def test_bare_statcard_tag_is_a_count_stat():
    widgets = widgets_from_wire([{"id": 1, "type": "statcard", "title": "Orders", "dataSource": "sale_order"}])

    assert len(widgets) == 1
    assert widgets[0].type == "stat"
    assert widgets[0].settings == StatSettings(calculation_type="count")


# ── Outbound ─────────────────────────────────────────────────────

def test_stat_is_stored_as_plain_stat(sum_stat):
    body = widget_to_wire(sum_stat, user_id="u1")

    assert body["widget_type"] == "stat"
    assert body["config"]["calculationType"] == "sum"
    assert body["config"]["yAxisKey"] == "amount_total"
    assert body["user_id"] == "u1"


def test_client_shape_carries_encoded_tag(sum_stat):
    payload = widget_to_client(sum_stat)

    assert payload["type"] == "statcard-sum"
    assert payload["dataSource"] == "sale_order"
    assert payload["gridSpan"] == 1


def test_client_round_trip(sum_stat, bar_widget):
    for widget in (sum_stat, bar_widget):
        assert widget_from_wire(widget_to_client(widget)) == widget


def test_none_settings_are_dropped(bar_widget):
    config = widget_to_wire(bar_widget)["config"]
    assert "color" not in config
    assert config["xAxisKey"] == "state"
    assert config["aggregateType"] == "count"


def test_update_payload(sum_stat):
    assert widget_update_payload(sum_stat) == {
        "title": "Revenue",
        "source_table": "sale_order",
        "config": {"calculationType": "sum", "yAxisKey": "amount_total", "filters": []},
    }


def test_backend_ids():
    assert backend_widget_id("w-42") == "42"
    assert is_persisted_id("w-42")
    assert not is_persisted_id("w-3f9ac1d20b7e")


# ── Preview requests ─────────────────────────────────────────────

def test_chart_preview_request(bar_widget):
    request = build_preview_request(bar_widget, time_range="7d", limit=50)

    assert request["sourceTable"] == "sale_order"
    assert request["config"] == {
        "widgetType": "bar",
        "filters": [],
        "limit": 50,
        "timeRange": "7d",
        "xAxisKey": "state",
        "aggregateType": "count",
        "yAxisKey": "value",
    }


def test_count_stat_preview_omits_value_field():
    widget = WidgetConfig(
        id="w-1", type="stat", title="Orders", data_source="sale_order",
        settings=StatSettings(calculation_type="count", y_axis_key="amount_total"),
    )
    config = build_preview_request(widget)["config"]
    assert config["calculationType"] == "count"
    assert "yAxisKey" not in config


def test_preview_limit_defaults_to_setting(list_widget):
    config = build_preview_request(list_widget)["config"]
    assert config["limit"] == 1000
    assert config["dataKeys"] == ["name", "state"]


def test_stat_summary_request(sum_stat):
    assert build_stat_summary_request(sum_stat, "30d") == {
        "sourceTable": "sale_order",
        "config": {
            "widgetType": "stat",
            "calculationType": "sum",
            "title": "Revenue",
            "timeRange": "30d",
            "yAxisKey": "amount_total",
        },
    }


def test_stat_summary_request_rejects_charts(bar_widget):
    with pytest.raises(WidgetConfigError):
        build_stat_summary_request(bar_widget)
