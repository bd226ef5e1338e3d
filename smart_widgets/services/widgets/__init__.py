"""
Widget Engine — render dispatcher.

Modules:
  base           : BaseWidget ABC, DisplayContext and WidgetResult.
  engine         : WidgetEngine — dynamic instantiation via Registry Pattern.
  helpers        : Shared utilities (coercion, date ordering, formatters).
  feeds          : YAML-backed feed definitions.
  types/         : Concrete renderers (stat card, charts, list, feeds).
"""

from smart_widgets.services.widgets.base import BaseWidget, DisplayContext, WidgetResult
from smart_widgets.services.widgets.engine import WidgetEngine, widget_engine

__all__ = ["BaseWidget", "DisplayContext", "WidgetResult", "WidgetEngine", "widget_engine"]
