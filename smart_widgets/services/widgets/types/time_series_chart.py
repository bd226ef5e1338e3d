"""
Chart: time series — line, area and sparkline.

Rows are ordered by the x field (chronologically when every x parses as
a date) on a copy; the input row-set keeps its order.  The y field
defaults to ``value``, the generic aggregate column the backend returns.
"""

from __future__ import annotations

from typing import Any, Dict, List

from smart_widgets.services.widgets.base import BaseWidget, WidgetResult
from smart_widgets.services.widgets.helpers import (
    alpha,
    format_axis_label,
    format_compact,
    sort_time_series,
    title_case_key,
    to_number,
)


class TimeSeriesChart(BaseWidget):

    def process(self) -> WidgetResult:
        x_key = self.settings.x_axis_key
        if not x_key:
            return self._placeholder("Please configure X-axis (date column)")

        if not self.rows:
            return self._empty()

        y_key = self.settings.y_axis_key or "value"
        ordered = sort_time_series(self.rows, x_key)
        values = [to_number(row.get(y_key)) for row in ordered]

        cfg = self.ctx.config
        color = self.settings.color or self.display.color(cfg.get("palette_index", 0))
        fill = self.settings.fill if self.settings.fill is not None else cfg.get("fill", False)

        dataset: Dict[str, Any] = {
            "label": title_case_key(y_key),
            "data": values,
            "borderColor": color,
            "backgroundColor": alpha(color, 0.4 if fill else 0.15),
            "fill": fill,
            "tension": 0.4,
            "pointRadius": cfg.get("point_radius", 4),
        }

        raw_labels: List[Any] = [row.get(x_key) for row in ordered]
        data: Dict[str, Any] = {
            "labels": [format_axis_label(v) for v in raw_labels],
            "raw_labels": raw_labels,
            "datasets": [dataset],
            "x_key": x_key,
            "y_key": y_key,
            "y_tick_format": "compact",
            "value_labels": [format_compact(v) for v in values],
            "grid_color": self.display.grid_color,
        }
        if self.widget.type == "sparkline":
            label = self.display.time_range_label
            data["caption"] = "All Time" if label == "all time" else label

        return self._result(data, total_points=len(ordered))
