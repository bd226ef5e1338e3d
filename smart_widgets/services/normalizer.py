"""
Wire normalization — the one place raw widget records become ``WidgetConfig``.

Two record shapes reach the engine:

  * backend rows:  ``{id, widget_type, widget_name, title, source_table,
    config, grid_span}`` where ``config`` is a flat camelCase dict and
    chart widgets may still carry ``calculationType`` instead of
    ``aggregateType``;
  * client dicts:  ``{id, type, title, dataSource, settings, gridSpan}``
    where stat widgets may use an encoded tag (``statcard-sum``).

``widget_from_wire`` folds both into the canonical in-memory model.
Everything downstream reads only ``WidgetConfig``.  The outbound
builders at the bottom produce the backend POST / PUT / preview bodies.

Usage::

    from smart_widgets.services.normalizer import widget_from_wire, widget_to_wire

    widget = widget_from_wire(row)          # WidgetConfig
    body = widget_to_wire(widget)           # POST /widgets body
"""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any, Dict, List, Optional

from smart_widgets.core.config import settings as app_settings
from smart_widgets.core.errors import WidgetConfigError
from smart_widgets.models.widget import (
    AXIS_CHART_KINDS,
    CATEGORICAL_KINDS,
    TIME_SERIES_KINDS,
    WIDGET_KINDS,
    AxisChartSettings,
    FixedFeedSettings,
    ListSettings,
    OperationSettings,
    ScatterSettings,
    StatSettings,
    WidgetConfig,
    WidgetSettings,
)
from smart_widgets.services.codec import decode_type, encode_type

logger = logging.getLogger(__name__)

WIDGET_ID_PREFIX = "w-"

# snake_case settings attribute → camelCase wire key
_WIRE_KEYS = {
    "x_axis_key": "xAxisKey",
    "y_axis_key": "yAxisKey",
    "aggregate_type": "aggregateType",
    "calculation_type": "calculationType",
    "data_keys": "dataKeys",
    "operation_type": "operationType",
    "color": "color",
    "fill": "fill",
    "format": "format",
    "filters": "filters",
}


# ─────────────────────────────────────────────────────────────
#  INBOUND
# ─────────────────────────────────────────────────────────────

def widget_from_wire(record: Dict[str, Any]) -> WidgetConfig:
    """
    Normalize a backend or client record into a ``WidgetConfig``.

    Raises:
        WidgetConfigError: unknown widget type or inconsistent settings.
    """
    is_backend = "widget_type" in record or "source_table" in record

    if is_backend:
        raw_type = record.get("widget_type") or ""
        raw_settings = dict(record.get("config") or {})
        data_source = record.get("source_table") or ""
        title = record.get("title") or record.get("widget_name") or ""
        grid_span = record.get("grid_span") or 1
    else:
        raw_type = record.get("type") or ""
        raw_settings = dict(record.get("settings") or {})
        data_source = record.get("dataSource") or record.get("data_source") or ""
        title = record.get("title") or ""
        grid_span = record.get("gridSpan") or record.get("grid_span") or 1

    kind, mode = decode_type(raw_type, raw_settings.get("calculationType"))
    if kind not in WIDGET_KINDS:
        raise WidgetConfigError(f"Unknown widget type '{raw_type}'")

    try:
        grid_span = int(grid_span)
    except (TypeError, ValueError):
        raise WidgetConfigError(f"grid_span must be 1 or 2, got {grid_span!r}")

    return WidgetConfig(
        id=_client_widget_id(record.get("id")),
        type=kind,
        title=str(title),
        data_source=str(data_source),
        settings=_settings_from_wire(kind, mode, raw_settings),
        grid_span=grid_span,
    )


def widgets_from_wire(records: List[Dict[str, Any]]) -> List[WidgetConfig]:
    """Normalize a list of records, skipping (and logging) invalid ones."""
    widgets: List[WidgetConfig] = []
    for record in records or []:
        try:
            widgets.append(widget_from_wire(record))
        except WidgetConfigError as exc:
            logger.warning(
                f"[Normalizer] Skipping widget {record.get('id')!r}: {exc}"
            )
    return widgets


def _client_widget_id(raw_id: Any) -> str:
    if raw_id is None or raw_id == "":
        raise WidgetConfigError("Widget record has no id")
    text = str(raw_id)
    if text.startswith(WIDGET_ID_PREFIX):
        return text
    if text.isdigit():
        return f"{WIDGET_ID_PREFIX}{text}"
    return text


def _settings_from_wire(kind: str, mode: Optional[str], raw: Dict[str, Any]) -> WidgetSettings:
    filters = tuple(raw.get("filters") or ())

    if kind == "stat":
        return StatSettings(
            calculation_type=mode or "count",
            y_axis_key=raw.get("yAxisKey") or None,
            format=raw.get("format") or None,
            filters=filters,
        )

    if kind in AXIS_CHART_KINDS:
        aggregate = raw.get("aggregateType") or raw.get("calculationType") or "count"
        return AxisChartSettings(
            x_axis_key=raw.get("xAxisKey") or None,
            y_axis_key=raw.get("yAxisKey") or None,
            aggregate_type=aggregate,
            color=raw.get("color") or None,
            fill=raw.get("fill"),
            filters=filters,
        )

    if kind == "scatter":
        return ScatterSettings(
            x_axis_key=raw.get("xAxisKey") or None,
            y_axis_key=raw.get("yAxisKey") or None,
            color=raw.get("color") or None,
            filters=filters,
        )

    if kind == "list":
        return ListSettings(data_keys=tuple(raw.get("dataKeys") or ()), filters=filters)

    if kind == "latestOperations":
        operation = raw.get("operationType") or None
        if operation is None:
            logger.warning("[Normalizer] latestOperations widget without operationType")
        return OperationSettings(operation_type=operation)

    return FixedFeedSettings()


# ─────────────────────────────────────────────────────────────
#  OUTBOUND
# ─────────────────────────────────────────────────────────────

def settings_to_wire(widget_settings: WidgetSettings) -> Dict[str, Any]:
    """Flatten a settings variant to camelCase, dropping ``None`` values."""
    flat: Dict[str, Any] = {}
    for f in fields(widget_settings):
        value = getattr(widget_settings, f.name)
        if value is None:
            continue
        if isinstance(value, tuple):
            value = list(value)
        flat[_WIRE_KEYS.get(f.name, f.name)] = value
    return flat


def widget_to_wire(widget: WidgetConfig, user_id: Optional[str] = None) -> Dict[str, Any]:
    """Backend POST body.  Stat widgets are stored as ``stat`` + ``config.calculationType``."""
    return {
        "widget_name": widget.title,
        "widget_type": widget.type,
        "source_table": widget.data_source,
        "title": widget.title,
        "grid_span": widget.grid_span,
        "config": settings_to_wire(widget.settings),
        "user_id": user_id,
    }


def widget_update_payload(widget: WidgetConfig) -> Dict[str, Any]:
    """Backend PUT body."""
    return {
        "title": widget.title,
        "source_table": widget.data_source,
        "config": settings_to_wire(widget.settings),
    }


def widget_to_client(widget: WidgetConfig) -> Dict[str, Any]:
    """Single-discriminator shape: stat widgets carry the encoded tag."""
    return {
        "id": widget.id,
        "type": encode_type(widget.type, widget.calculation_type),
        "title": widget.title,
        "dataSource": widget.data_source,
        "settings": settings_to_wire(widget.settings),
        "gridSpan": widget.grid_span,
    }


def backend_widget_id(widget_id: str) -> str:
    """``w-42`` → ``42``."""
    if widget_id.startswith(WIDGET_ID_PREFIX):
        return widget_id[len(WIDGET_ID_PREFIX):]
    return widget_id


def is_persisted_id(widget_id: str) -> bool:
    return backend_widget_id(widget_id).isdigit()


# ── Preview requests ─────────────────────────────────────────

def build_preview_request(
    widget: WidgetConfig,
    time_range: str = "all",
    limit: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Body for ``POST widgets/preview``::

        {"sourceTable": ..., "config": {"widgetType": ..., ...}}
    """
    s = widget.settings
    config: Dict[str, Any] = {
        "widgetType": widget.type,
        "filters": list(getattr(s, "filters", ()) or ()),
        "limit": limit if limit is not None else app_settings.PREVIEW_LIMIT,
        "timeRange": time_range,
    }

    if isinstance(s, ListSettings):
        config["dataKeys"] = list(s.data_keys)
    elif isinstance(s, StatSettings):
        config["calculationType"] = s.calculation_type
        if s.needs_value_field and s.y_axis_key:
            config["yAxisKey"] = s.y_axis_key
    elif widget.type in TIME_SERIES_KINDS or widget.type in CATEGORICAL_KINDS:
        if s.x_axis_key:
            config["xAxisKey"] = s.x_axis_key
        config["aggregateType"] = s.aggregate_type
        if s.y_axis_key:
            config["yAxisKey"] = s.y_axis_key
    elif isinstance(s, OperationSettings):
        if s.operation_type:
            config["operationType"] = s.operation_type
        else:
            logger.warning(
                f"[Normalizer] latestOperations widget {widget.id} "
                f"has no operationType"
            )

    return {"sourceTable": widget.data_source, "config": config}


def build_stat_summary_request(widget: WidgetConfig, time_range: str = "all") -> Dict[str, Any]:
    """Stat card preview: mode plus title so the backend can infer gaps."""
    if not isinstance(widget.settings, StatSettings):
        raise WidgetConfigError(f"Widget '{widget.id}' is not a stat widget")

    config: Dict[str, Any] = {
        "widgetType": "stat",
        "calculationType": widget.settings.calculation_type,
        "title": widget.title,
        "timeRange": time_range,
    }
    if widget.settings.y_axis_key:
        config["yAxisKey"] = widget.settings.y_axis_key
    return {"sourceTable": widget.data_source, "config": config}
