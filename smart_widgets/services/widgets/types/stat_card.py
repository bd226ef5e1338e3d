"""
KPI: Stat card — one number reduced from the row-set.

``count`` trusts a pre-aggregated ``_count`` row when the backend sent
one, otherwise counts rows.  The other modes coerce the value field,
drop non-numeric cells and reduce; nothing numeric left is "no data",
never zero.
"""

from __future__ import annotations

from smart_widgets.services.widgets.base import BaseWidget, WidgetResult
from smart_widgets.services.widgets.helpers import (
    format_stat_value,
    is_currency_field,
    numeric_values,
    reduce_values,
    to_number,
)

MODE_LABELS = {"sum": "Sum", "average": "Average", "min": "Min", "max": "Max"}


class StatCard(BaseWidget):

    def process(self) -> WidgetResult:
        mode = self.settings.calculation_type
        key = self.settings.y_axis_key

        if mode == "count":
            return self._stat(self._count(), "Count", currency=False)

        if not key:
            return self._placeholder(f"Please select a column for {mode}")

        value = reduce_values(numeric_values(self.rows, key), mode)
        if value is None:
            return self._empty("No numeric data available")

        currency = is_currency_field(key, self.settings.format)
        return self._stat(value, f"{MODE_LABELS[mode]} of {key}", currency=currency)

    def _count(self) -> float:
        rows = self.rows
        if len(rows) == 1 and "_count" in rows[0]:
            parsed = to_number(rows[0]["_count"])
            if parsed is not None:
                return parsed
        return float(len(rows))

    def _stat(self, value: float, label: str, currency: bool) -> WidgetResult:
        mode = self.settings.calculation_type
        symbol = self.display.currency_symbol if currency else None
        return self._result(
            {
                "value": value,
                "display": format_stat_value(value, mode, symbol),
                "label": label,
                "is_currency": currency,
                "icon": "DollarSign" if currency else "Hash",
                "caption": f"View for {self.display.time_range_label}",
            },
            calculation_type=mode,
        )
