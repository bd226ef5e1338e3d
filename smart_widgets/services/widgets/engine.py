"""
WidgetEngine — Dynamic renderer instantiation via Registry Pattern.

Single Responsibility: given a resolved ``WidgetConfig`` and its rows,
instantiate the correct renderer class and execute ``process()``.

Uses ``WIDGET_REGISTRY`` for metadata and Python's module system for
class resolution.  No hardcoded if/else chains.

Usage::

    from smart_widgets.services.widgets.engine import widget_engine

    result = widget_engine.render(widget, rows, DisplayContext(mode="light"))
    result.to_dict()
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, Iterable, List, Optional, Type

from smart_widgets.config.widget_registry import WIDGET_REGISTRY
from smart_widgets.models.widget import WidgetConfig
from smart_widgets.services.widgets.base import (
    STATE_ERROR,
    BaseWidget,
    DisplayContext,
    WidgetContext,
    WidgetResult,
)

logger = logging.getLogger(__name__)

# Module path where concrete renderers live
_WIDGET_MODULE = "smart_widgets.services.widgets.types"


class WidgetEngine:
    """
    Dynamic renderer resolver and executor.

    Pipeline per widget:
      1. Look up metadata in WIDGET_REGISTRY.
      2. Import the concrete class from ``services/widgets/types/``.
      3. Build WidgetContext with the rows and display context.
      4. Call ``widget.process()`` → WidgetResult.

    ``allowed_kinds`` narrows the engine to a subset of kinds (the
    simulation panel only renders charts).
    """

    def __init__(
        self,
        registry: Optional[Dict[str, Dict[str, Any]]] = None,
        allowed_kinds: Optional[Iterable[str]] = None,
    ) -> None:
        self._registry = registry if registry is not None else WIDGET_REGISTRY
        self._allowed = frozenset(allowed_kinds) if allowed_kinds is not None else None
        # Cache: class_name → class object (avoids repeated imports)
        self._class_cache: Dict[str, Type[BaseWidget]] = {}

    @property
    def kinds(self) -> List[str]:
        """Kinds this engine can render."""
        return [k for k in self._registry if self._allowed is None or k in self._allowed]

    def supports(self, kind: str) -> bool:
        return kind in self._registry and (self._allowed is None or kind in self._allowed)

    def restricted_to(self, kinds: Iterable[str]) -> "WidgetEngine":
        """A sibling engine limited to *kinds*, sharing the registry."""
        return WidgetEngine(registry=self._registry, allowed_kinds=kinds)

    def render(
        self,
        widget: WidgetConfig,
        rows: Optional[List[Dict[str, Any]]] = None,
        display: Optional[DisplayContext] = None,
        simulated: bool = False,
    ) -> WidgetResult:
        """Render one widget.  Never raises: failures become error results."""
        # 1. Registry metadata
        registry_entry = self._registry.get(widget.type)
        if not registry_entry or not self.supports(widget.type):
            logger.warning(f"[WidgetEngine] '{widget.type}' not renderable here")
            return self.render_error(widget, f"Widget type '{widget.type}' is not supported")

        # 2. Import concrete class
        class_name = registry_entry["class"]
        widget_cls = self._resolve_class(class_name)
        if widget_cls is None:
            return self.render_error(
                widget, f"Class '{class_name}' not found in {_WIDGET_MODULE}",
            )

        # 3. Build context
        ctx = WidgetContext(
            widget=widget,
            rows=list(rows or []),
            display=display or DisplayContext(),
            config=dict(registry_entry.get("default_config", {})),
            category=registry_entry.get("category", "chart"),
            simulated=simulated,
        )

        # 4. Execute
        try:
            return widget_cls(ctx).process()
        except Exception as exc:
            logger.error(
                f"[WidgetEngine] Error rendering '{widget.id}' ({widget.type}): {exc}",
                exc_info=True,
            )
            return self.render_error(widget, str(exc))

    def render_error(self, widget: WidgetConfig, message: str) -> WidgetResult:
        """Error result for a widget whose data could not be fetched or shaped."""
        category = self._registry.get(widget.type, {}).get("category", "error")
        return WidgetResult(
            widget_id=widget.id,
            widget_name=widget.title,
            widget_type=widget.type,
            data=None,
            metadata={
                "widget_category": category,
                "state": STATE_ERROR,
                "message": f"Error: {message}",
            },
        )

    def _resolve_class(self, class_name: str) -> Optional[Type[BaseWidget]]:
        """
        Import and cache the renderer class by its name.

        Converts CamelCase class name to snake_case module name:
          ``TimeSeriesChart`` → ``time_series_chart``
        """
        if class_name in self._class_cache:
            return self._class_cache[class_name]

        module_name = self._class_to_module(class_name)
        full_path = f"{_WIDGET_MODULE}.{module_name}"

        try:
            module = importlib.import_module(full_path)
            cls = getattr(module, class_name, None)
            if cls and issubclass(cls, BaseWidget):
                self._class_cache[class_name] = cls
                return cls
            logger.error(
                f"[WidgetEngine] {full_path} does not export '{class_name}' "
                f"as a BaseWidget subclass"
            )
        except ImportError as exc:
            logger.error(f"[WidgetEngine] Cannot import {full_path}: {exc}")

        return None

    @staticmethod
    def _class_to_module(class_name: str) -> str:
        """
        Convert CamelCase to snake_case for module resolution.

        ``StatCard``           → ``stat_card``
        ``LatestOperationsFeed`` → ``latest_operations_feed``
        """
        result: List[str] = []
        for i, ch in enumerate(class_name):
            if ch.isupper() and i > 0:
                result.append("_")
            result.append(ch.lower())
        return "".join(result)


# ── Singleton ────────────────────────────────────────────────────
widget_engine = WidgetEngine()
