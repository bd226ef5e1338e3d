"""
Chart: scatter — one point per row, x and y both numeric.

No sorting, no aggregation.  Rows whose x or y does not coerce to a
number are left out.
"""

from __future__ import annotations

from typing import Any, Dict, List

from smart_widgets.services.widgets.base import BaseWidget, WidgetResult
from smart_widgets.services.widgets.helpers import alpha, to_number


class ScatterChart(BaseWidget):

    def process(self) -> WidgetResult:
        x_key = self.settings.x_axis_key
        y_key = self.settings.y_axis_key
        if not x_key or not y_key:
            return self._placeholder("Please configure X and Y axes")

        if not self.rows:
            return self._empty()

        points: List[Dict[str, Any]] = []
        for row in self.rows:
            x = to_number(row.get(x_key))
            y = to_number(row.get(y_key))
            if x is None or y is None:
                continue
            points.append({"x": x, "y": y})

        if not points:
            return self._empty("No numeric data available")

        color = self.settings.color or self.display.color(self.ctx.config.get("palette_index", 2))

        return self._result(
            {
                "datasets": [{
                    "label": "Values",
                    "data": points,
                    "backgroundColor": alpha(color, 0.7),
                    "borderColor": color,
                    "pointRadius": 5,
                }],
                "x_key": x_key,
                "y_key": y_key,
                "grid_color": self.display.grid_color,
            },
            total_points=len(points),
        )
