"""
ResponseAssembler — shapes one dashboard render into the page JSON.

Grid widgets are keyed by id in render order; stat cards travel
separately because the frontend draws them as a row above the grid::

    {
        "widgets":  {"w-7": {...WidgetResult.to_dict()...}, ...},
        "stats":    {"w-3": {"value", "label", "icon", "gradient"}, ...},
        "metadata": {
            "widget_count", "stat_count", "error_count",
            "states": {"ok": 3, "empty": 1, ...},
            "time_range", "elapsed_seconds", "timestamp",
        },
    }
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Mapping

from smart_widgets.services.stats.aggregator import StatSummary
from smart_widgets.services.widgets.base import STATE_ERROR, STATE_OK


class ResponseAssembler:

    @staticmethod
    def assemble(
        rendered: List[Dict[str, Any]],
        stats: Mapping[str, StatSummary],
        time_range: str,
        elapsed: float,
    ) -> Dict[str, Any]:
        """
        Args:
            rendered:    ``WidgetResult.to_dict()`` of every grid widget.
            stats:       Stat summaries keyed by widget id.
            time_range:  The range every widget was fetched with.
            elapsed:     Seconds spent fetching and rendering.
        """
        states = Counter(r.get("metadata", {}).get("state", STATE_OK) for r in rendered)
        return {
            "widgets": {str(r["widget_id"]): r for r in rendered},
            "stats": {wid: summary.to_dict() for wid, summary in stats.items()},
            "metadata": {
                "widget_count": len(rendered),
                "stat_count": len(stats),
                "error_count": states.get(STATE_ERROR, 0),
                "states": dict(states),
                "time_range": time_range,
                "elapsed_seconds": round(elapsed, 3),
                "timestamp": datetime.now().isoformat(),
            },
        }

    @staticmethod
    def empty(time_range: str = "all") -> Dict[str, Any]:
        """A page with no widgets."""
        return ResponseAssembler.assemble([], {}, time_range, 0.0)
