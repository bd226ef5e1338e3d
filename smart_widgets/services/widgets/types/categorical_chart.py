"""
Chart: categorical — bar, pie and donut.

Plotted in row-set order, no sorting.  Pie and donut also get a legend
built straight from the rows: palette colour by index and the category
name truncated to 20 characters.
"""

from __future__ import annotations

from typing import Any, Dict, List

from smart_widgets.services.widgets.base import BaseWidget, WidgetResult
from smart_widgets.services.widgets.helpers import (
    alpha,
    format_compact,
    title_case_key,
    to_number,
    truncate,
)


class CategoricalChart(BaseWidget):

    def process(self) -> WidgetResult:
        x_key = self.settings.x_axis_key
        if not x_key:
            return self._placeholder("Please configure X-axis (category column)")

        if not self.rows:
            return self._empty()

        y_key = self.settings.y_axis_key or "value"
        cfg = self.ctx.config

        labels: List[str] = []
        for idx, row in enumerate(self.rows):
            name = row.get(x_key)
            labels.append(str(name) if name not in (None, "") else f"Category {idx + 1}")
        values = [to_number(row.get(y_key)) for row in self.rows]

        data: Dict[str, Any] = {
            "labels": labels,
            "x_key": x_key,
            "y_key": y_key,
        }

        if self.widget.type == "bar":
            color = self.settings.color or self.display.color(cfg.get("palette_index", 1))
            tick = cfg.get("tick_length", 15)
            data["tick_labels"] = [label[:tick] for label in labels]
            data["datasets"] = [{
                "label": title_case_key(y_key),
                "data": values,
                "backgroundColor": color,
                "hoverBackgroundColor": alpha(color, 0.8),
                "borderRadius": 4,
            }]
            data["y_tick_format"] = "compact"
            data["value_labels"] = [format_compact(v) for v in values]
            data["grid_color"] = self.display.grid_color
        else:
            colors = [self.display.color(i) for i in range(len(labels))]
            legend_length = cfg.get("legend_length", 20)
            data["datasets"] = [{
                "label": title_case_key(y_key),
                "data": values,
                "backgroundColor": colors,
                "borderColor": "#18181b" if self.display.mode == "dark" else "#ffffff",
            }]
            data["cutout"] = cfg.get("cutout", "0%")
            data["legend"] = [
                {"label": truncate(label, legend_length), "color": color}
                for label, color in zip(labels, colors)
            ]

        return self._result(data, total_points=len(labels))
