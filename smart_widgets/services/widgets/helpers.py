"""
Shared helpers for widget renderers.

Single Responsibility: reusable utility functions consumed by
multiple widget types.  No widget-specific logic here.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd


# ── Numeric coercion ─────────────────────────────────────────────

def to_number(value: Any) -> Optional[float]:
    """Coerce a cell to float; ``None`` for absent or non-numeric values."""
    if value is None or isinstance(value, (bool, dict, list, tuple)):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    number = pd.to_numeric(value, errors="coerce")
    if pd.isna(number):
        return None
    return float(number)


def field_value(row: Dict[str, Any], key: str) -> Any:
    """
    Read *key* from *row*, falling back to its display-name variants.

    Foreign-key columns often arrive as ``category_id`` plus a
    ``category_id_name`` / ``category_name`` display column.
    """
    for candidate in (key, f"{key}_name", key.replace("_id", "_name")):
        value = row.get(candidate)
        if value is not None and value != "":
            return value
    return None


def numeric_values(rows: Iterable[Dict[str, Any]], key: str) -> List[float]:
    """Numeric values of *key* across *rows*; non-numeric cells are dropped."""
    values = (to_number(field_value(row, key)) for row in rows)
    return [v for v in values if v is not None]


def reduce_values(values: List[float], mode: str) -> Optional[float]:
    """Reduce with sum / average / min / max.  ``None`` when *values* is empty."""
    if not values:
        return None
    series = pd.Series(values, dtype="float64")
    if mode == "sum":
        return float(series.sum())
    if mode == "average":
        return float(series.mean())
    if mode == "min":
        return float(series.min())
    if mode == "max":
        return float(series.max())
    raise ValueError(f"Cannot reduce with mode '{mode}'")


# ── Stat formatting ──────────────────────────────────────────────

CURRENCY_KEYWORDS = ("revenue", "profit", "amount", "price", "cost")


def is_currency_field(key: Optional[str], fmt: Optional[str] = None) -> bool:
    if fmt == "currency":
        return True
    if not key:
        return False
    lowered = key.lower()
    return any(word in lowered for word in CURRENCY_KEYWORDS)


def format_stat_value(value: float, mode: str, currency_symbol: Optional[str] = None) -> str:
    """
    ``average`` keeps two decimals; whole numbers get thousands
    separators; other fractions are rounded to two decimals.
    """
    if mode == "average":
        text = f"{value:.2f}"
    elif float(value).is_integer():
        text = f"{int(value):,}"
    else:
        text = f"{value:,.2f}"
    return f"{currency_symbol}{text}" if currency_symbol else text


# ── Time series ──────────────────────────────────────────────────

def parse_date(value: Any) -> Optional[pd.Timestamp]:
    """Parse a cell as a timestamp (tz-naive); ``None`` when it does not parse."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        ts = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts


def sort_time_series(rows: List[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    """
    Return a new list of *rows* ordered by *key*.

    Dates are compared chronologically when every present value parses;
    otherwise the order is lexicographic on ``str(value)``.  Rows without
    a value go last.  The sort is stable and *rows* is left untouched.
    """
    present = [row.get(key) for row in rows if row.get(key) not in (None, "")]

    if present and all(parse_date(v) is not None for v in present):
        def date_key(row: Dict[str, Any]):
            value = row.get(key)
            if value in (None, ""):
                return (1, pd.Timestamp.min)
            return (0, parse_date(value))
        return sorted(rows, key=date_key)

    def text_key(row: Dict[str, Any]):
        value = row.get(key)
        if value in (None, ""):
            return (1, "")
        return (0, str(value))
    return sorted(rows, key=text_key)


_DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}")
_MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")


def format_axis_label(value: Any) -> str:
    """``2024-03-05…`` → ``Mar 5``; ``2024-03`` → ``Mar 2024``; others unchanged."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return f"{value:%b} {value.day}"
    text = str(value)
    if _DAY_PATTERN.match(text):
        ts = parse_date(text)
        if ts is not None:
            return f"{ts:%b} {ts.day}"
    elif _MONTH_PATTERN.match(text):
        ts = parse_date(f"{text}-01")
        if ts is not None:
            return f"{ts:%b %Y}"
    return text


def format_compact(value: Any) -> str:
    """Y-axis tick formatter: ``1500`` → ``1.5k``."""
    if value is None:
        return ""
    number = to_number(value)
    if number is None:
        return str(value)
    if number >= 1000:
        return f"{number / 1000:g}k"
    return f"{number:g}"


def time_ago(when: Any, now: datetime) -> str:
    """``Just now`` / ``1 hour ago`` / ``N hours ago``; missing dates count as now."""
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    ts = parse_date(when)
    moment = ts.to_pydatetime() if ts is not None else now
    hours = int((now - moment).total_seconds() // 3600)
    if hours < 1:
        return "Just now"
    if hours == 1:
        return "1 hour ago"
    return f"{hours} hours ago"


# ── Text ─────────────────────────────────────────────────────────

def truncate(text: Any, length: int = 20) -> str:
    text = str(text)
    return f"{text[:length]}..." if len(text) > length else text


def title_case_key(key: str) -> str:
    """``category_id`` → ``Category Id``."""
    return " ".join(word.capitalize() for word in key.replace("_", " ").split())


def stringify_cell(value: Any) -> str:
    """Display text for a list cell; ``-`` for nothing usable."""
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join("" if v is None else str(v) for v in value)
    if isinstance(value, dict):
        for attr in ("name", "label", "id"):
            if value.get(attr):
                return str(value[attr])
        try:
            text = json.dumps(value, default=str)
        except (TypeError, ValueError):
            return "-"
        return f"{text[:100]}..." if len(text) > 100 else text
    return str(value)


# ── Colour palettes ─────────────────────────────────────────────

def alpha(hex_color: str, a: float = 0.15) -> str:
    """Convert '#RRGGBB' → 'rgba(r,g,b,a)'."""
    h = hex_color.lstrip("#")
    if len(h) != 6:
        return f"rgba(100,100,100,{a})"
    r, g, b = int(h[:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    return f"rgba({r},{g},{b},{a})"
