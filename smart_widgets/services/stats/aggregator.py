"""
StatSummaryAggregator — one preview request per stat card, all in flight at once.

Each response is mapped on its own into a ``StatSummary``.  A failing
widget gets the ``{0, "Error"}`` card; its siblings are unaffected.

Usage::

    from smart_widgets.services.stats.aggregator import StatSummaryAggregator

    summaries = await StatSummaryAggregator(backend_client).summarize(widgets, "7d")
    # {"w-12": StatSummary(value="1,204", label="Total Orders", ...), ...}
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence

from smart_widgets.models.widget import WidgetConfig
from smart_widgets.services.broker.backend_client import BackendClient
from smart_widgets.services.normalizer import build_stat_summary_request
from smart_widgets.services.widgets.base import DisplayContext
from smart_widgets.services.widgets.helpers import (
    field_value,
    format_stat_value,
    is_currency_field,
    reduce_values,
    to_number,
)

logger = logging.getLogger(__name__)

CARD_GRADIENTS = (
    "linear-gradient(135deg, #dc2626 0%, #ea580c 100%)",
    "linear-gradient(135deg, #f59e0b 0%, #d97706 100%)",
    "linear-gradient(135deg, #4facfe 0%, #00f2fe 100%)",
    "linear-gradient(135deg, #43e97b 0%, #38f9d7 100%)",
    "linear-gradient(135deg, #667eea 0%, #764ba2 100%)",
    "linear-gradient(135deg, #f6d365 0%, #fda085 100%)",
)

FALLBACK_ICONS = (
    "Calculator", "BarChart3", "Hash", "TrendingUp",
    "Activity", "Database", "Layers", "Package",
)

# (icon, title words, data-source words, value-field words); first match wins.
ICON_RULES = (
    ("DollarSign", ("revenue", "income", "sales", "money"), (), ("revenue", "profit")),
    ("TrendingUp", ("profit", "margin", "earning"), (), ()),
    ("Package", ("product", "item", "sku"), ("product",), ("product",)),
    ("Layers", ("stock", "inventory", "quantity", "qty"), ("stock", "inventory"), ()),
    ("Activity", ("order", "transfer", "receipt", "shipment"), ("picking", "transfer"), ()),
    ("Hash", ("count", "total", "number", "amount"), (), ()),
    ("TrendingUp", ("trend", "growth", "increase", "change"), (), ()),
    ("Database", ("database", "data", "record"), ("database",), ()),
    ("Layers", ("warehouse", "location", "zone"), (), ()),
    ("Activity", ("user", "employee", "worker"), (), ()),
)


@dataclass(frozen=True)
class StatSummary:
    value: str
    label: str
    icon: str = "Calculator"
    gradient: str = CARD_GRADIENTS[0]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def card_style(widget: WidgetConfig, index: int) -> Dict[str, str]:
    """Icon from title / data source / value field keywords; gradient by position."""
    title = (widget.title or "").lower()
    source = (widget.data_source or "").lower()
    field = (widget.settings.y_axis_key or "").lower()

    icon = None
    for name, title_words, source_words, field_words in ICON_RULES:
        if (
            any(w in title for w in title_words)
            or any(w in source for w in source_words)
            or any(w in field for w in field_words)
        ):
            icon = name
            break

    return {
        "icon": icon or FALLBACK_ICONS[index % len(FALLBACK_ICONS)],
        "gradient": CARD_GRADIENTS[index % len(CARD_GRADIENTS)],
    }


def summarize_rows(
    widget: WidgetConfig,
    rows: List[Dict[str, Any]],
    currency_symbol: str = "$",
) -> Dict[str, str]:
    """Map one preview response into ``{value, label}``."""
    s = widget.settings
    mode = s.calculation_type
    no_data = {"value": "0", "label": widget.title or "No data"}

    if not rows:
        return no_data

    if mode == "count":
        count = to_number(rows[0].get("_count")) if len(rows) == 1 else None
        if count is None:
            count = len(rows)
        return {"value": f"{int(count):,}", "label": widget.title or "Count"}

    key = s.y_axis_key
    if not key:
        return no_data

    if len(rows) == 1:
        row = rows[0]
        raw = row.get(key)
        if raw is None:
            raw = row.get("value")
        if raw is None:
            raw = row.get(key.replace("_id", "_name"))
        result = to_number(raw)
    else:
        values = []
        for r in rows:
            raw = field_value(r, key)
            number = to_number(r.get("value") if raw is None else raw)
            if number is not None:
                values.append(number)
        result = reduce_values(values, mode)

    if result is None:
        return no_data

    currency = currency_symbol if is_currency_field(key, s.format) else None
    return {
        "value": format_stat_value(result, mode, currency),
        "label": widget.title or f"{mode} of {key}",
    }


class StatSummaryAggregator:

    def __init__(self, client: BackendClient, ctx: Optional[DisplayContext] = None) -> None:
        self._client = client
        self.ctx = ctx or DisplayContext()

    async def summarize(
        self,
        widgets: Sequence[WidgetConfig],
        time_range: str = "all",
    ) -> Dict[str, StatSummary]:
        stat_widgets = [w for w in widgets if w.is_stat]
        if not stat_widgets:
            return {}

        outcomes = await asyncio.gather(
            *(self._summarize_one(w, time_range) for w in stat_widgets),
            return_exceptions=True,
        )

        summaries: Dict[str, StatSummary] = {}
        for index, (widget, outcome) in enumerate(zip(stat_widgets, outcomes)):
            if isinstance(outcome, BaseException):
                logger.error(f"[StatSummary] Widget {widget.id} failed: {outcome}")
                outcome = {"value": "0", "label": "Error"}
            summaries[widget.id] = StatSummary(**outcome, **card_style(widget, index))
        return summaries

    async def _summarize_one(self, widget: WidgetConfig, time_range: str) -> Dict[str, str]:
        request = build_stat_summary_request(widget, time_range)
        result = await self._client.preview(request["sourceTable"], request["config"])
        if not result["ok"]:
            logger.error(f"[StatSummary] Widget {widget.id}: {result['error']}")
            return {"value": "0", "label": "Error"}

        data = result["data"]
        if isinstance(data, dict):
            data = [data]
        rows = [r for r in data or [] if isinstance(r, dict)]
        return summarize_rows(widget, rows, self.ctx.currency_symbol)
