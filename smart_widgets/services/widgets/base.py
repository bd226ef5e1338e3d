"""
BaseWidget — Abstract base class for all widget renderers.

Single Responsibility: define the contract that every renderer must follow.
Renderers are "dumb processors" — they receive a resolved ``WidgetConfig``
plus an already-fetched row-set and return a structured JSON-ready result.

Every concrete renderer inherits from BaseWidget and implements ``process()``.
The renderer does NOT know how its rows were obtained (backend preview or
a simulation buffer).

Usage in a concrete renderer::

    from smart_widgets.services.widgets.base import BaseWidget, WidgetResult

    class StatCard(BaseWidget):
        def process(self) -> WidgetResult:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from smart_widgets.models.widget import WidgetConfig, WidgetSettings

DEFAULT_PALETTE: Tuple[str, ...] = (
    "#8b5cf6", "#ec4899", "#06b6d4", "#10b981", "#f59e0b", "#ef4444",
)

# Render states carried in ``WidgetResult.metadata["state"]``
STATE_OK = "ok"
STATE_UNCONFIGURED = "unconfigured"
STATE_EMPTY = "empty"
STATE_ERROR = "error"


@dataclass(frozen=True)
class DisplayContext:
    """
    Ambient display settings passed explicitly into every render.

    ``now`` pins the clock for relative time strings; ``None`` means
    the current time.
    """
    palette: Tuple[str, ...] = DEFAULT_PALETTE
    mode: str = "dark"
    currency_symbol: str = "$"
    time_range: str = "all"
    now: Optional[datetime] = None

    def color(self, index: int) -> str:
        return self.palette[index % len(self.palette)]

    @property
    def grid_color(self) -> str:
        if self.mode == "dark":
            return "rgba(255, 255, 255, 0.1)"
        return "rgba(0, 0, 0, 0.1)"

    @property
    def time_range_label(self) -> str:
        return "all time" if self.time_range == "all" else self.time_range

    def current_time(self) -> datetime:
        return self.now or datetime.now()


@dataclass
class WidgetContext:
    """
    Everything a renderer needs to process its data.

    Populated by the WidgetEngine before calling ``process()``.
    """
    widget: WidgetConfig
    rows: List[Dict[str, Any]] = field(default_factory=list)
    display: DisplayContext = field(default_factory=DisplayContext)

    # Renderer-specific config from WIDGET_REGISTRY.default_config
    config: Dict[str, Any] = field(default_factory=dict)

    category: str = "chart"
    simulated: bool = False


@dataclass
class WidgetResult:
    """
    Standardized output from any renderer.

    ``metadata["state"]`` is one of ok / unconfigured / empty / error.
    """
    widget_id: str
    widget_name: str
    widget_type: str
    data: Any
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def state(self) -> str:
        return self.metadata.get("state", STATE_OK)

    @property
    def message(self) -> Optional[str]:
        return self.metadata.get("message")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "widget_id": self.widget_id,
            "widget_name": self.widget_name,
            "widget_type": self.widget_type,
            "data": self.data,
            "metadata": self.metadata,
        }


class BaseWidget(ABC):
    """
    Abstract base class for all renderers.

    Subclasses MUST implement:
      - ``process()`` → WidgetResult

    The renderer receives its context through ``self.ctx`` which contains
    the widget config, its rows, the display context and registry config.
    """

    def __init__(self, ctx: WidgetContext) -> None:
        self.ctx = ctx

    @abstractmethod
    def process(self) -> WidgetResult:
        """
        Shape the rows into a visualization payload.

        Returns:
            WidgetResult with the renderer's processed data.
        """
        ...

    # ── Convenience properties ───────────────────────────────────

    @property
    def widget(self) -> WidgetConfig:
        return self.ctx.widget

    @property
    def settings(self) -> WidgetSettings:
        return self.ctx.widget.settings

    @property
    def rows(self) -> List[Dict[str, Any]]:
        return self.ctx.rows

    @property
    def display(self) -> DisplayContext:
        return self.ctx.display

    # ── Result builders ──────────────────────────────────────────

    def _result(self, data: Any, **meta: Any) -> WidgetResult:
        """Shorthand to build a successful WidgetResult."""
        return self._build(data, state=STATE_OK, **meta)

    def _empty(self, message: str = "No data available") -> WidgetResult:
        """Valid request, nothing to show."""
        return self._build(None, state=STATE_EMPTY, message=message)

    def _placeholder(self, message: str) -> WidgetResult:
        """A required setting is missing."""
        return self._build(None, state=STATE_UNCONFIGURED, message=message)

    def _build(self, data: Any, **meta: Any) -> WidgetResult:
        return WidgetResult(
            widget_id=self.widget.id,
            widget_name=self.widget.title,
            widget_type=self.widget.type,
            data=data,
            metadata={
                "widget_category": self.ctx.category,
                "simulated": self.ctx.simulated,
                **meta,
            },
        )
