"""
Column and table metadata as delivered by the aggregation backend.

The backend has shipped three column shapes over time::

    {"name", "label", "type", "isDateType"}
    {"name", "label", "dataType", "isNumeric", "isDateLike"}
    {"column_name", "display_name", "data_type", "is_numeric"}

``ColumnInfo.from_wire`` accepts any of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    label: str
    data_type: str = ""
    is_numeric: Optional[bool] = None
    is_date_like: Optional[bool] = None

    @classmethod
    def from_wire(cls, raw: Dict[str, Any]) -> "ColumnInfo":
        name = raw.get("name") or raw.get("column_name") or ""
        label = raw.get("label") or raw.get("display_name") or name
        data_type = raw.get("type") or raw.get("dataType") or raw.get("data_type") or ""

        is_numeric = _first_present(raw, "is_numeric", "isNumeric")
        is_date = _first_present(raw, "isDateType", "isDateLike", "is_date_like")

        return cls(
            name=str(name),
            label=str(label),
            data_type=str(data_type),
            is_numeric=bool(is_numeric) if is_numeric is not None else None,
            is_date_like=bool(is_date) if is_date is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "data_type": self.data_type,
            "is_numeric": self.is_numeric,
            "is_date_like": self.is_date_like,
        }


@dataclass(frozen=True)
class TableInfo:
    table_name: str
    display_name: str

    @classmethod
    def from_wire(cls, raw: Dict[str, Any]) -> "TableInfo":
        name = raw.get("table_name") or raw.get("name") or ""
        return cls(
            table_name=str(name),
            display_name=str(raw.get("display_name") or raw.get("label") or name),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"table_name": self.table_name, "display_name": self.display_name}


def _first_present(raw: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None
