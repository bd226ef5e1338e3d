"""
Table: custom list — one row per record, one cell per projected column.

Each cell prefers the ``{column}_name`` display variant over the raw
value.  Known image columns are decoded into data URIs when the cell
holds a data URI or a plain base64 string.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from smart_widgets.services.widgets.base import BaseWidget, WidgetResult
from smart_widgets.services.widgets.helpers import stringify_cell, title_case_key

IMAGE_COLUMNS = frozenset({"image_512", "image_1920", "image_1024", "image_256", "image_128"})

_BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/=]+$")
_WHITESPACE = re.compile(r"\s")


def is_image_column(key: str) -> bool:
    return key.lower() in IMAGE_COLUMNS


def extract_image_data(value: Any) -> Optional[str]:
    """Data URI for an image cell, or ``None`` when it is not one."""
    if not value:
        return None

    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        if trimmed.startswith("data:image/"):
            return trimmed
        clean = _WHITESPACE.sub("", trimmed)
        if _BASE64_PATTERN.match(clean):
            return f"data:image/png;base64,{clean}"
        return None

    if isinstance(value, dict):
        for attr in ("data", "image", "base64"):
            if value.get(attr):
                return extract_image_data(value[attr])

    return None


class ItemList(BaseWidget):

    def process(self) -> WidgetResult:
        keys = list(self.settings.data_keys)
        if not keys:
            return self._placeholder("Please select columns to display")

        if not self.rows:
            return self._empty()

        columns = [
            {"key": key, "label": title_case_key(key), "is_image": is_image_column(key)}
            for key in keys
        ]
        items = [self._cells(row, keys) for row in self.rows]

        return self._result(
            {"columns": columns, "rows": items},
            total_rows=len(items),
        )

    @staticmethod
    def _cells(row: Dict[str, Any], keys: List[str]) -> Dict[str, Dict[str, Any]]:
        cells: Dict[str, Dict[str, Any]] = {}
        for key in keys:
            value = row.get(f"{key}_name") or row.get(key)
            if is_image_column(key):
                src = extract_image_data(value)
                cells[key] = {"type": "image", "src": src} if src else {"type": "text", "value": "-"}
            else:
                cells[key] = {"type": "text", "value": stringify_cell(value)}
        return cells
