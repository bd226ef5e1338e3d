"""
DashboardService — the canonical widget list and everything done to it.

Single Responsibility: own the page's widgets and coordinate the other
services around them:

  Persistence  → BackendClient           (``services.broker.backend_client``)
  Ingestion    → widgets_from_wire       (``services.normalizer``)
  Rendering    → WidgetEngine            (``services.widgets.engine``)
  Stat cards   → StatSummaryAggregator   (``services.stats.aggregator``)
  Assembly     → ResponseAssembler       (``assembler.py``)

The widget list is a tuple and is replaced wholesale on every add,
remove and edit; nothing mutates it in place.

Usage::

    from smart_widgets.services.orchestrator import dashboard_service

    await dashboard_service.load()
    result = await dashboard_service.render("w-12", time_range="7d")
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from smart_widgets.core.config import settings as app_settings
from smart_widgets.core.errors import WidgetConfigError, WidgetNotFoundError
from smart_widgets.models.widget import StatSettings, WidgetConfig
from smart_widgets.services.broker.backend_client import APIResult, BackendClient, backend_client
from smart_widgets.services.normalizer import (
    backend_widget_id,
    build_preview_request,
    is_persisted_id,
    widget_from_wire,
    widget_to_wire,
    widget_update_payload,
    widgets_from_wire,
)
from smart_widgets.services.orchestrator.assembler import ResponseAssembler
from smart_widgets.services.stats.aggregator import StatSummary, StatSummaryAggregator
from smart_widgets.services.widgets.base import DisplayContext, WidgetResult
from smart_widgets.services.widgets.engine import WidgetEngine, widget_engine
from smart_widgets.services.wizard.titles import stat_edit_title

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Holds the page's widgets and runs fetch → render for each of them.

    ``add`` and ``remove`` always change the local list; the backend is
    kept in step on a best-effort basis.
    """

    def __init__(
        self,
        client: Optional[BackendClient] = None,
        engine: Optional[WidgetEngine] = None,
        ctx: Optional[DisplayContext] = None,
    ) -> None:
        self._client = client or backend_client
        self._engine = engine or widget_engine
        self.ctx = ctx or DisplayContext()
        self._widgets: Tuple[WidgetConfig, ...] = ()

    # ─────────────────────────────────────────────────────────
    #  WIDGET LIST
    # ─────────────────────────────────────────────────────────

    @property
    def widgets(self) -> Tuple[WidgetConfig, ...]:
        return self._widgets

    def get(self, widget_id: str) -> Optional[WidgetConfig]:
        for widget in self._widgets:
            if widget.id == widget_id:
                return widget
        return None

    def require(self, widget_id: str) -> WidgetConfig:
        widget = self.get(widget_id)
        if widget is None:
            raise WidgetNotFoundError(widget_id)
        return widget

    def stat_widgets(self) -> List[WidgetConfig]:
        return [w for w in self._widgets if w.is_stat]

    def grid_widgets(self) -> List[WidgetConfig]:
        return [w for w in self._widgets if not w.is_stat]

    async def load(self, user_id: Optional[str] = None) -> Tuple[WidgetConfig, ...]:
        """Replace the list with the backend's.  On failure the list is kept."""
        result = await self._client.list_widgets(user_id)
        if not result["ok"]:
            logger.error(f"[Dashboard] Could not load widgets: {result['error']}")
            return self._widgets

        self._widgets = tuple(widgets_from_wire(result["data"] or []))
        logger.info(f"[Dashboard] Loaded {len(self._widgets)} widgets")
        return self._widgets

    async def add(self, widget: WidgetConfig) -> WidgetConfig:
        """Persist *widget*; the backend's copy wins, the local one is kept on failure."""
        result = await self._client.create_widget(
            widget_to_wire(widget, app_settings.USER_ID)
        )
        stored = widget
        if result["ok"] and isinstance(result["data"], dict):
            try:
                stored = widget_from_wire(result["data"])
            except WidgetConfigError as exc:
                logger.warning(f"[Dashboard] Backend copy of '{widget.id}' unreadable: {exc}")
        elif not result["ok"]:
            logger.warning(f"[Dashboard] Keeping '{widget.id}' locally: {result['error']}")

        self._widgets = self._widgets + (stored,)
        return stored

    async def remove(self, widget_id: str) -> bool:
        """Drop the widget locally even when the backend delete fails."""
        if self.get(widget_id) is None:
            return False

        if is_persisted_id(widget_id):
            result = await self._client.delete_widget(backend_widget_id(widget_id))
            if not result["ok"]:
                logger.warning(f"[Dashboard] Backend delete of '{widget_id}' failed: {result['error']}")

        self._widgets = tuple(w for w in self._widgets if w.id != widget_id)
        return True

    async def edit_stat(
        self,
        widget_id: str,
        title: Optional[str],
        data_source: str,
        calculation_type: str,
        value_key: Optional[str] = None,
        table_label: Optional[str] = None,
    ) -> WidgetConfig:
        """
        Dedicated stat-card edit.  A blank title is regenerated; the
        value field is only kept for non-count modes.
        """
        current = self.require(widget_id)
        if not isinstance(current.settings, StatSettings):
            raise WidgetConfigError(f"Widget '{widget_id}' is not a stat widget")

        new_settings = replace(
            current.settings,
            calculation_type=calculation_type,
            y_axis_key=value_key,
        )
        if not new_settings.needs_value_field:
            new_settings = replace(new_settings, y_axis_key=None)
        field = new_settings.y_axis_key
        new_title = (title or "").strip() or stat_edit_title(
            table_label or data_source, calculation_type, field,
        )
        updated = current.with_changes(
            title=new_title, data_source=data_source, settings=new_settings,
        )

        if is_persisted_id(widget_id):
            result = await self._client.update_widget(
                backend_widget_id(widget_id), widget_update_payload(updated),
            )
            if not result["ok"]:
                logger.warning(f"[Dashboard] Backend update of '{widget_id}' failed: {result['error']}")

        self._widgets = tuple(updated if w.id == widget_id else w for w in self._widgets)
        return updated

    # ─────────────────────────────────────────────────────────
    #  DATA + RENDERING
    # ─────────────────────────────────────────────────────────

    async def fetch_rows(self, widget: WidgetConfig, time_range: str = "all") -> APIResult:
        """Preview request for *widget*; ``data`` is always a list of rows on success."""
        request = build_preview_request(widget, time_range)
        result = await self._client.preview(request["sourceTable"], request["config"])
        if result["ok"]:
            data = result["data"]
            if isinstance(data, dict):
                data = [data]
            result["data"] = [r for r in data or [] if isinstance(r, dict)]
        return result

    async def render(
        self,
        widget_id: str,
        time_range: str = "all",
        display: Optional[DisplayContext] = None,
    ) -> WidgetResult:
        widget = self.require(widget_id)
        ctx = replace(display or self.ctx, time_range=time_range)

        result = await self.fetch_rows(widget, time_range)
        if not result["ok"]:
            return self._engine.render_error(widget, result["error"] or "Failed to fetch data")
        return self._engine.render(widget, result["data"], ctx)

    async def render_all(self, time_range: str = "all") -> Dict[str, Any]:
        """Every grid widget plus the stat card row, assembled into one response."""
        if not self._widgets:
            return ResponseAssembler.empty(time_range)

        t0 = time.perf_counter()
        results = [
            (await self.render(w.id, time_range)).to_dict()
            for w in self.grid_widgets()
        ]
        stats = await self.summarize_stats(time_range)
        return ResponseAssembler.assemble(
            results, stats, time_range, time.perf_counter() - t0,
        )

    async def summarize_stats(self, time_range: str = "all") -> Dict[str, StatSummary]:
        aggregator = StatSummaryAggregator(self._client, self.ctx)
        return await aggregator.summarize(self.stat_widgets(), time_range)


# ── Singleton ────────────────────────────────────────────────────
dashboard_service = DashboardService()
