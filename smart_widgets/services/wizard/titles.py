"""
Title inference for widgets created without a title.

Pure functions: the same inputs always give the same title, and the
title is computed once at creation, never re-derived afterwards.
"""

from __future__ import annotations

from typing import Optional

from smart_widgets.models.widget import CATEGORICAL_KINDS, TIME_SERIES_KINDS
from smart_widgets.services.widgets.feeds import feed_config

TITLE_MAX_LENGTH = 40

STAT_MODE_LABELS = {"sum": "Sum", "average": "Average", "min": "Minimum", "max": "Maximum"}
CHART_MODE_LABELS = {"sum": "Sum", "average": "Average", "min": "Min", "max": "Max"}


def infer_title(
    kind: str,
    table_label: str,
    *,
    calculation_type: str = "count",
    aggregate_type: str = "count",
    x_label: Optional[str] = None,
    y_label: Optional[str] = None,
    operation_type: Optional[str] = None,
) -> str:
    """Derive a title from the widget kind, its table and its field labels."""
    if kind in ("lowStock", "transfers"):
        fixed = feed_config.get_fixed(kind)
        if fixed:
            return fixed.title

    if kind == "latestOperations":
        operation = feed_config.get_operation(operation_type)
        return operation.title if operation else "Latest Operations"

    if kind == "stat":
        if calculation_type == "count":
            return f"Total {table_label} Count"
        if y_label:
            return f"{STAT_MODE_LABELS.get(calculation_type, calculation_type)} of {y_label}"
        return f"{calculation_type.capitalize()} of {table_label}"

    if kind in TIME_SERIES_KINDS:
        if y_label and aggregate_type != "count":
            return f"{CHART_MODE_LABELS.get(aggregate_type, aggregate_type)} of {y_label} Over Time"
        return f"{table_label} Count Over Time"

    if kind in CATEGORICAL_KINDS:
        if not x_label:
            return f"{table_label} {kind.capitalize()} Chart"
        if y_label and aggregate_type != "count":
            return f"{CHART_MODE_LABELS.get(aggregate_type, aggregate_type)} of {y_label} by {x_label}"
        return f"Count by {x_label}"

    if kind == "list":
        return f"{table_label} List"

    return f"{table_label} {kind.capitalize()}"


def resolve_title(user_title: Optional[str], inferred: str) -> str:
    """A non-blank user title always wins over the inferred one."""
    if user_title and user_title.strip():
        return user_title.strip()[:TITLE_MAX_LENGTH]
    return inferred


def stat_edit_title(table_label: str, calculation_type: str, field: Optional[str]) -> str:
    """Title written by the stat-card edit path."""
    if calculation_type == "count" or not field:
        return f"Total {table_label}"
    return f"{STAT_MODE_LABELS.get(calculation_type, calculation_type)} of {field}"
