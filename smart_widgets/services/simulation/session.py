"""
Simulation — what-if edits over a chart widget's fetched rows.

A session deep-copies the rows it is opened with into a private buffer.
Edits replace single numeric cells in that buffer and the chart is
re-rendered from it through the same renderers the dashboard uses;
the original rows are never written to.  Closing drops the buffer.

Usage::

    from smart_widgets.services.simulation.session import simulation_registry

    session = simulation_registry.open(widget, rows)
    session.set_field(0, "value", 7)
    result = session.render()          # WidgetResult, metadata.simulated=True
    simulation_registry.close(widget.id)
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from smart_widgets.core.errors import SimulationError
from smart_widgets.models.widget import CHART_KINDS, ScatterSettings, WidgetConfig
from smart_widgets.services.widgets.base import DisplayContext, WidgetResult
from smart_widgets.services.widgets.engine import WidgetEngine, widget_engine
from smart_widgets.services.widgets.helpers import to_number

logger = logging.getLogger(__name__)

EXPORT_FAILED_ALERT = "Failed to export image."

# Receives (filename, rendered result); raises on failure.
SnapshotExporter = Callable[[str, WidgetResult], Any]


@dataclass(frozen=True)
class SnapshotOutcome:
    ok: bool
    filename: str
    alert: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "filename": self.filename, "alert": self.alert}


class SimulationSession:

    def __init__(
        self,
        widget: WidgetConfig,
        original_rows: List[Dict[str, Any]],
        engine: Optional[WidgetEngine] = None,
        ctx: Optional[DisplayContext] = None,
    ) -> None:
        if widget.type not in CHART_KINDS:
            raise SimulationError(
                f"Simulation is only available for charts, not '{widget.type}'",
                widget_id=widget.id,
            )
        self.widget = widget
        self._original = original_rows
        self._engine = engine or widget_engine.restricted_to(CHART_KINDS)
        self.ctx = ctx or DisplayContext()
        self._buffer: Optional[List[Dict[str, Any]]] = None

    # ── Lifecycle ────────────────────────────────────────────────

    def open(self) -> "SimulationSession":
        """(Re)start from a fresh copy of the original rows."""
        self._buffer = copy.deepcopy(list(self._original or []))
        logger.debug(f"[Simulation] Opened for '{self.widget.id}' ({len(self._buffer)} rows)")
        return self

    @property
    def is_open(self) -> bool:
        return self._buffer is not None

    def close(self) -> None:
        self._buffer = None

    @property
    def buffer(self) -> List[Dict[str, Any]]:
        self._require_open()
        return self._buffer

    # ── Editing ──────────────────────────────────────────────────

    def set_field(self, row_index: int, field: str, value: Any) -> bool:
        """
        Replace one cell.  Non-numeric input becomes ``0``; an index
        outside the buffer is ignored and returns ``False``.
        """
        self._require_open()
        if not 0 <= row_index < len(self._buffer):
            return False
        number = to_number(value)
        self._buffer[row_index] = {
            **self._buffer[row_index],
            field: number if number is not None else 0,
        }
        return True

    def editable_fields(self) -> List[Dict[str, Any]]:
        """One input row per buffer row: its label and the editable field(s)."""
        self._require_open()
        s = self.widget.settings
        x_key = s.x_axis_key or "name"

        if isinstance(s, ScatterSettings):
            y_key = s.y_axis_key or "y"
            return [
                {
                    "index": i,
                    "label": f"Point {i + 1}",
                    "fields": {x_key: row.get(x_key) or 0, y_key: row.get(y_key) or 0},
                }
                for i, row in enumerate(self._buffer)
            ]

        y_key = s.y_axis_key or "value"
        return [
            {
                "index": i,
                "label": str(row.get(x_key) or row.get("name") or f"Item {i + 1}"),
                "fields": {y_key: row.get(y_key) or row.get("value") or 0},
            }
            for i, row in enumerate(self._buffer)
        ]

    # ── Output ───────────────────────────────────────────────────

    def render(self) -> WidgetResult:
        self._require_open()
        return self._engine.render(self.widget, self._buffer, self.ctx, simulated=True)

    def snapshot_filename(self) -> str:
        slug = re.sub(r"\s+", "-", self.widget.title.lower())
        millis = int(self.ctx.current_time().timestamp() * 1000)
        return f"simulation-{slug}-{millis}.png"

    def export_snapshot(self, exporter: SnapshotExporter) -> SnapshotOutcome:
        """Hand the rendered chart to *exporter*; its failures become an alert."""
        filename = self.snapshot_filename()
        try:
            exporter(filename, self.render())
        except Exception as exc:
            logger.error(f"[Simulation] Export failed for '{self.widget.id}': {exc}")
            return SnapshotOutcome(ok=False, filename=filename, alert=EXPORT_FAILED_ALERT)
        return SnapshotOutcome(ok=True, filename=filename)

    def _require_open(self) -> None:
        if self._buffer is None:
            raise SimulationError("Simulation session is closed", widget_id=self.widget.id)


class SimulationRegistry:
    """At most one open session per widget id."""

    def __init__(self, engine: Optional[WidgetEngine] = None) -> None:
        self._engine = engine
        self._sessions: Dict[str, SimulationSession] = {}

    def open(
        self,
        widget: WidgetConfig,
        rows: List[Dict[str, Any]],
        ctx: Optional[DisplayContext] = None,
    ) -> SimulationSession:
        existing = self._sessions.get(widget.id)
        if existing is not None and existing.is_open:
            return existing
        session = SimulationSession(widget, rows, engine=self._engine, ctx=ctx).open()
        self._sessions[widget.id] = session
        return session

    def get(self, widget_id: str) -> Optional[SimulationSession]:
        session = self._sessions.get(widget_id)
        return session if session is not None and session.is_open else None

    def close(self, widget_id: str) -> bool:
        session = self._sessions.pop(widget_id, None)
        if session is None:
            return False
        session.close()
        return True


# ── Singleton ────────────────────────────────────────────────────
simulation_registry = SimulationRegistry()
