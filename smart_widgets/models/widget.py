"""
Widget data model — ``WidgetConfig`` and its settings variants.

A widget is ``(id, type, title, data_source, settings, grid_span)``.
``settings`` is a closed union keyed by ``type``: each variant declares
exactly the fields its renderer reads, so nothing downstream has to
probe for optional keys.

Stat widgets carry their calculation mode in ``StatSettings`` only.
The encoded ``statcard-<mode>`` tag is never stored here; it is derived
at the serialization boundary (see ``services/codec.py``).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple, Type, Union

from smart_widgets.core.errors import WidgetConfigError


# ── Vocabulary ───────────────────────────────────────────────────

WIDGET_KINDS: Tuple[str, ...] = (
    "stat",
    "line",
    "bar",
    "area",
    "pie",
    "donut",
    "scatter",
    "sparkline",
    "list",
    "lowStock",
    "transfers",
    "latestOperations",
)

CALCULATION_MODES: Tuple[str, ...] = ("count", "sum", "average", "min", "max")

OPERATION_TYPES: Tuple[str, ...] = (
    "latestTransfers",
    "latestActivities",
    "suppliers",
    "lowStock",
)

TIME_SERIES_KINDS = frozenset({"line", "area", "sparkline"})
CATEGORICAL_KINDS = frozenset({"bar", "pie", "donut"})
AXIS_CHART_KINDS = TIME_SERIES_KINDS | CATEGORICAL_KINDS
CHART_KINDS = AXIS_CHART_KINDS | {"scatter"}
FIXED_SOURCE_KINDS = frozenset({"lowStock", "transfers"})
FEED_KINDS = FIXED_SOURCE_KINDS | {"latestOperations"}

GRID_SPANS = (1, 2)


# ── Settings variants ────────────────────────────────────────────

@dataclass(frozen=True)
class AxisChartSettings:
    """line / area / sparkline / bar / pie / donut."""
    x_axis_key: Optional[str] = None
    y_axis_key: Optional[str] = None
    aggregate_type: str = "count"
    color: Optional[str] = None
    fill: Optional[bool] = None
    filters: Tuple[Dict[str, Any], ...] = ()

    def __post_init__(self) -> None:
        _check_mode(self.aggregate_type)


@dataclass(frozen=True)
class ScatterSettings:
    x_axis_key: Optional[str] = None
    y_axis_key: Optional[str] = None
    color: Optional[str] = None
    filters: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class ListSettings:
    data_keys: Tuple[str, ...] = ()
    filters: Tuple[Dict[str, Any], ...] = ()


@dataclass(frozen=True)
class StatSettings:
    """Scalar widgets: the calculation mode plus the value field."""
    calculation_type: str = "count"
    y_axis_key: Optional[str] = None
    format: Optional[str] = None
    filters: Tuple[Dict[str, Any], ...] = ()

    def __post_init__(self) -> None:
        _check_mode(self.calculation_type)

    @property
    def needs_value_field(self) -> bool:
        return self.calculation_type != "count"


@dataclass(frozen=True)
class OperationSettings:
    operation_type: Optional[str] = None

    def __post_init__(self) -> None:
        if self.operation_type is not None and self.operation_type not in OPERATION_TYPES:
            raise WidgetConfigError(f"Unknown operation type '{self.operation_type}'")


@dataclass(frozen=True)
class FixedFeedSettings:
    """lowStock / transfers — fixed data source, nothing to configure."""


WidgetSettings = Union[
    AxisChartSettings,
    ScatterSettings,
    ListSettings,
    StatSettings,
    OperationSettings,
    FixedFeedSettings,
]


def settings_class_for(kind: str) -> Type[Any]:
    """Return the settings variant that belongs to *kind*."""
    if kind in AXIS_CHART_KINDS:
        return AxisChartSettings
    if kind == "scatter":
        return ScatterSettings
    if kind == "list":
        return ListSettings
    if kind == "stat":
        return StatSettings
    if kind == "latestOperations":
        return OperationSettings
    if kind in FIXED_SOURCE_KINDS:
        return FixedFeedSettings
    raise WidgetConfigError(f"Unknown widget type '{kind}'")


def is_stat_kind(kind: str) -> bool:
    return kind == "stat"


def new_widget_id() -> str:
    """Opaque id for widgets that have not been persisted yet."""
    return f"w-{uuid.uuid4().hex[:12]}"


def _check_mode(mode: str) -> None:
    if mode not in CALCULATION_MODES:
        raise WidgetConfigError(f"Unknown calculation type '{mode}'")


# ── WidgetConfig ─────────────────────────────────────────────────

@dataclass(frozen=True)
class WidgetConfig:
    """
    One configured dashboard widget.

    Immutable: edits go through ``with_changes()`` and the dashboard
    replaces its widget list wholesale.
    """
    id: str
    type: str
    title: str
    data_source: str
    settings: WidgetSettings = field(default_factory=FixedFeedSettings)
    grid_span: int = 1

    def __post_init__(self) -> None:
        expected = settings_class_for(self.type)
        if not isinstance(self.settings, expected):
            raise WidgetConfigError(
                f"Widget '{self.id}' of type '{self.type}' needs "
                f"{expected.__name__}, got {type(self.settings).__name__}"
            )
        if self.grid_span not in GRID_SPANS:
            raise WidgetConfigError(
                f"grid_span must be 1 or 2, got {self.grid_span!r}"
            )

    # ── Convenience ──

    @property
    def is_stat(self) -> bool:
        return is_stat_kind(self.type)

    @property
    def is_chart(self) -> bool:
        return self.type in CHART_KINDS

    @property
    def calculation_type(self) -> Optional[str]:
        """Decoded calculation mode for stat widgets, ``None`` otherwise."""
        if isinstance(self.settings, StatSettings):
            return self.settings.calculation_type
        return None

    def with_changes(self, **changes: Any) -> "WidgetConfig":
        return replace(self, **changes)
