"""
Column classifier — splits a table's columns for the field pickers.

Pure function of the column list.  The three groups are picker
populations, not a partition: a numeric column that is not date-like
shows up in both ``numeric`` and ``other``.

Usage::

    from smart_widgets.services.columns.classifier import classify_columns

    groups = classify_columns(columns)
    groups.numeric     # ("amount", "qty")
    groups.date_like   # ("created_at",)
    groups.other       # everything not date-like
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Tuple

from smart_widgets.models.columns import ColumnInfo

NUMERIC_TYPES = frozenset({
    "int",
    "integer",
    "bigint",
    "smallint",
    "mediumint",
    "tinyint",
    "decimal",
    "numeric",
    "float",
    "double",
    "real",
    "double precision",
})

_DATE_TYPE_MARKERS = ("date", "time", "timestamp")

_DATE_NAME_PATTERN = re.compile(
    r"(_date$|^date_|^date$|_at$|_on$|(^|_)time(stamp)?(_|$))",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ColumnClassification:
    numeric: Tuple[str, ...]
    date_like: Tuple[str, ...]
    other: Tuple[str, ...]


def _base_type(data_type: str) -> str:
    """``decimal(10,2) unsigned`` → ``decimal``."""
    base = data_type.lower().split("(", 1)[0].strip()
    return base.replace(" unsigned", "").strip()


def is_numeric_column(column: ColumnInfo) -> bool:
    if column.is_numeric:
        return True
    return _base_type(column.data_type) in NUMERIC_TYPES


def is_date_like_column(column: ColumnInfo) -> bool:
    if column.is_date_like:
        return True
    data_type = column.data_type.lower()
    if any(marker in data_type for marker in _DATE_TYPE_MARKERS):
        return True
    return bool(_DATE_NAME_PATTERN.search(column.name))


def classify_columns(columns: Iterable[ColumnInfo]) -> ColumnClassification:
    """Return numeric / date-like / other column names, input order kept."""
    numeric, date_like, other = [], [], []
    for column in columns:
        if is_numeric_column(column):
            numeric.append(column.name)
        if is_date_like_column(column):
            date_like.append(column.name)
        else:
            other.append(column.name)
    return ColumnClassification(tuple(numeric), tuple(date_like), tuple(other))
