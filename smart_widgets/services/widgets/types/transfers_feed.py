"""
Feed: Recent transfers — route, status dot, date and amount.

Capped at the first ``max_items`` rows of the fixed transfers source.
"""

from __future__ import annotations

from typing import Any, Dict, List

from smart_widgets.services.widgets.base import BaseWidget, WidgetResult
from smart_widgets.services.widgets.feeds import feed_config
from smart_widgets.services.widgets.helpers import format_stat_value, to_number

STATUS_COLORS = {
    "Completed": "#10b981",
    "Pending": "#f59e0b",
    "Processing": "#3b82f6",
    "Failed": "#ef4444",
}


class TransfersFeed(BaseWidget):

    def process(self) -> WidgetResult:
        feed = feed_config.get_fixed("transfers")
        max_items = feed.max_items if feed else 50

        if not self.rows:
            return self._empty(feed.empty_message if feed else "No transfers in this period.")

        items: List[Dict[str, Any]] = []
        for idx, row in enumerate(self.rows[:max_items]):
            amount = to_number(row.get("amount"))
            status = row.get("status")
            items.append({
                "key": f"{row.get('id')}-{idx}",
                "from": row.get("from"),
                "to": row.get("to"),
                "status": status,
                "status_color": STATUS_COLORS.get(status),
                "date": row.get("date"),
                "amount": amount,
                "amount_display": (
                    format_stat_value(amount, "sum", self.display.currency_symbol)
                    if amount is not None else "-"
                ),
            })

        return self._result(
            {"items": items, "total": len(items)},
            truncated=len(self.rows) > max_items,
        )
