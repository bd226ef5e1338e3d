"""
WidgetWizard — the three-step widget creation flow.

    select_visualization ──► configure_data ──► finalize
            │                                      ▲
            └──── lowStock / transfers ────────────┘

``lowStock`` and ``transfers`` have a fixed data source and jump straight
to ``finalize``.  ``latestOperations`` stays in ``configure_data`` but
picks a sub-operation instead of a table and fields.  Going back to the
first step forgets the chosen table and every field mapping.

Interactive use::

    wizard = WidgetWizard(client=backend_client)
    wizard.select_visualization("bar")
    await wizard.load_tables()
    await wizard.select_table("sale_order")
    wizard.set_x_axis("state")
    wizard.proceed()
    widget = wizard.finalize()

Non-interactive use (HTTP API)::

    wizard = WidgetWizard.from_draft(draft, tables, columns)
    widget = wizard.finalize()
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from smart_widgets.config.widget_registry import WIDGET_CATALOG
from smart_widgets.core.cache import ColumnCache
from smart_widgets.core.errors import WizardError, WizardValidationError
from smart_widgets.models.columns import ColumnInfo, TableInfo
from smart_widgets.models.widget import (
    AXIS_CHART_KINDS,
    CALCULATION_MODES,
    CATEGORICAL_KINDS,
    FIXED_SOURCE_KINDS,
    GRID_SPANS,
    OPERATION_TYPES,
    TIME_SERIES_KINDS,
    WIDGET_KINDS,
    AxisChartSettings,
    FixedFeedSettings,
    ListSettings,
    OperationSettings,
    ScatterSettings,
    StatSettings,
    WidgetConfig,
    WidgetSettings,
    new_widget_id,
)
from smart_widgets.services.codec import decode_type
from smart_widgets.services.columns.classifier import ColumnClassification, classify_columns
from smart_widgets.services.normalizer import widget_to_client
from smart_widgets.services.widgets.feeds import feed_config
from smart_widgets.services.wizard.titles import TITLE_MAX_LENGTH, infer_title, resolve_title

logger = logging.getLogger(__name__)


class WizardStep:
    SELECT_VISUALIZATION = "select_visualization"
    CONFIGURE_DATA = "configure_data"
    FINALIZE = "finalize"


_X_AXIS_KINDS = AXIS_CHART_KINDS | {"scatter"}
_Y_AXIS_KINDS = AXIS_CHART_KINDS | {"scatter", "stat"}


class WidgetWizard:
    """Creation state machine.  One instance per open wizard."""

    def __init__(
        self,
        client: Any = None,
        column_cache: Optional[ColumnCache] = None,
    ) -> None:
        self._client = client
        self._cache = column_cache or ColumnCache()
        self.tables: List[TableInfo] = []
        self.reset()

    def reset(self) -> None:
        """Back to an empty first step.  The table list is kept."""
        self.step = WizardStep.SELECT_VISUALIZATION
        self.kind: Optional[str] = None
        self.title: str = ""
        self.color: Optional[str] = None
        self.grid_span: int = 1
        self._clear_data()

    def _clear_data(self) -> None:
        self.table: Optional[str] = None
        self.columns: List[ColumnInfo] = []
        self.classification = ColumnClassification((), (), ())
        self._clear_fields()
        self.operation_type: Optional[str] = None

    def _clear_fields(self) -> None:
        self.x_axis_key: Optional[str] = None
        self.y_axis_key: Optional[str] = None
        self.data_keys: List[str] = []
        self.calculation_type: str = "count"
        self.aggregate_type: str = "count"

    # ─────────────────────────────────────────────────────────────
    #  STEP 1 — visualization
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def visualization_options() -> List[Dict[str, str]]:
        return [{"type": kind, **meta} for kind, meta in WIDGET_CATALOG.items()]

    def select_visualization(self, kind: str) -> str:
        """Pick a kind and move to the step it leads to."""
        self._require_step(WizardStep.SELECT_VISUALIZATION)
        if kind not in WIDGET_KINDS:
            raise WizardError(f"Unknown visualization '{kind}'")

        self.kind = kind
        self._clear_data()

        if kind in FIXED_SOURCE_KINDS:
            fixed = feed_config.get_fixed(kind)
            if fixed is None:
                raise WizardError(f"No fixed feed configured for '{kind}'")
            self.table = fixed.data_source
            self.title = fixed.title
            self.step = WizardStep.FINALIZE
        else:
            self.step = WizardStep.CONFIGURE_DATA
        return self.step

    # ─────────────────────────────────────────────────────────────
    #  STEP 2 — data
    # ─────────────────────────────────────────────────────────────

    async def load_tables(self) -> List[TableInfo]:
        if self._client is None:
            raise WizardError("No backend client configured")
        result = await self._client.list_tables()
        if not result["ok"]:
            logger.error(f"[Wizard] Could not load tables: {result['error']}")
            return []
        return self.use_tables(result["data"])

    def use_tables(self, tables: Iterable[TableInfo]) -> List[TableInfo]:
        self.tables = list(tables)
        return self.tables

    def filter_tables(self, term: str) -> List[TableInfo]:
        needle = (term or "").lower()
        return [
            t for t in self.tables
            if needle in t.display_name.lower() or needle in t.table_name.lower()
        ]

    async def select_table(self, name: str) -> List[ColumnInfo]:
        """Pick a table and load its columns through the session cache."""
        self._require_table_step()
        if self._client is None:
            raise WizardError("No backend client configured")
        columns = await self._cache.get_or_load(name, self._client.fetch_columns)
        return self.use_table(name, columns)

    def use_table(self, name: str, columns: Iterable[ColumnInfo]) -> List[ColumnInfo]:
        """Pick a table whose columns are already known."""
        self._require_table_step()
        if not name:
            raise WizardError("Table name is required")
        if name != self.table:
            self._clear_fields()
        self.table = name
        self.columns = list(columns)
        self._cache.put(name, self.columns)
        self.classification = classify_columns(self.columns)
        return self.columns

    def field_options(self) -> Dict[str, List[str]]:
        """Column names offered by each field picker for the current kind."""
        c = self.classification
        if self.kind in TIME_SERIES_KINDS:
            return {"x": list(c.date_like), "y": list(c.numeric)}
        if self.kind in CATEGORICAL_KINDS:
            return {"x": list(c.other), "y": list(c.numeric)}
        if self.kind == "scatter":
            return {"x": list(c.numeric), "y": list(c.numeric)}
        if self.kind == "stat":
            return {"y": list(c.numeric)}
        if self.kind == "list":
            return {"columns": [col.name for col in self.columns]}
        return {}

    def set_x_axis(self, name: Optional[str]) -> None:
        self._require_field(_X_AXIS_KINDS, "x")
        self._check_option("x", name)
        self.x_axis_key = name or None

    def set_y_axis(self, name: Optional[str]) -> None:
        self._require_field(_Y_AXIS_KINDS, "y")
        self._check_option("y", name)
        self.y_axis_key = name or None

    def set_data_keys(self, keys: Iterable[str]) -> None:
        self._require_field({"list"}, "columns")
        unique: List[str] = []
        for key in keys:
            self._check_option("columns", key)
            if key not in unique:
                unique.append(key)
        self.data_keys = unique

    def set_calculation_type(self, mode: str) -> None:
        self._require_field({"stat"}, "calculation type")
        if mode not in CALCULATION_MODES:
            raise WizardError(f"Unknown calculation type '{mode}'")
        self.calculation_type = mode

    def set_aggregate_type(self, mode: str) -> None:
        self._require_field(AXIS_CHART_KINDS, "aggregate type")
        if mode not in CALCULATION_MODES:
            raise WizardError(f"Unknown aggregate type '{mode}'")
        self.aggregate_type = mode

    def select_operation(self, operation_type: str) -> None:
        self._require_step(WizardStep.CONFIGURE_DATA)
        if self.kind != "latestOperations":
            raise WizardError("Operations apply to latestOperations widgets only")
        operation = feed_config.get_operation(operation_type)
        if operation_type not in OPERATION_TYPES or operation is None:
            raise WizardError(f"Unknown operation type '{operation_type}'")
        self.operation_type = operation_type
        self.table = operation.data_source

    # ── Presentation (any step) ──────────────────────────────────

    def set_title(self, title: Optional[str]) -> str:
        self.title = (title or "").strip()[:TITLE_MAX_LENGTH]
        return self.title

    def set_color(self, color: Optional[str]) -> None:
        self.color = color or None

    def set_grid_span(self, span: int) -> None:
        if span not in GRID_SPANS:
            raise WizardError(f"grid_span must be 1 or 2, got {span!r}")
        self.grid_span = span

    # ─────────────────────────────────────────────────────────────
    #  NAVIGATION
    # ─────────────────────────────────────────────────────────────

    def proceed(self) -> str:
        if self.step == WizardStep.SELECT_VISUALIZATION:
            raise WizardError("Select a visualization first")
        if self.step == WizardStep.FINALIZE:
            raise WizardError("Already at the last step")

        errors = self.validate()
        if errors:
            raise WizardValidationError(errors)
        self.step = WizardStep.FINALIZE
        return self.step

    def back(self) -> str:
        if self.step == WizardStep.SELECT_VISUALIZATION:
            raise WizardError("Already at the first step")

        if self.step == WizardStep.FINALIZE and self.kind not in FIXED_SOURCE_KINDS:
            self.step = WizardStep.CONFIGURE_DATA
            return self.step

        self.step = WizardStep.SELECT_VISUALIZATION
        self.kind = None
        self.title = ""
        self._clear_data()
        return self.step

    def validate(self) -> List[str]:
        """Submission gate; empty list when the widget can be created."""
        errors: List[str] = []
        if self.kind is None:
            errors.append("Select a visualization")
            return errors
        if self.kind == "latestOperations":
            if not self.operation_type:
                errors.append("Select an operation type")
        elif self.kind not in FIXED_SOURCE_KINDS and not self.table:
            errors.append("Select a table")
        return errors

    # ─────────────────────────────────────────────────────────────
    #  STEP 3 — finalize
    # ─────────────────────────────────────────────────────────────

    def finalize(self) -> WidgetConfig:
        """Assemble the ``WidgetConfig``, inferring a title when blank."""
        self._require_step(WizardStep.FINALIZE)
        errors = self.validate()
        if errors:
            raise WizardValidationError(errors)

        inferred = infer_title(
            self.kind,
            self.table_label,
            calculation_type=self.calculation_type,
            aggregate_type=self.aggregate_type,
            x_label=self.column_label(self.x_axis_key),
            y_label=self.column_label(self.y_axis_key),
            operation_type=self.operation_type,
        )

        return WidgetConfig(
            id=new_widget_id(),
            type=self.kind,
            title=resolve_title(self.title, inferred),
            data_source=self.table or "",
            settings=self._build_settings(),
            grid_span=self.grid_span,
        )

    def submit(self) -> Dict[str, Any]:
        """Finalize and hand out the single-discriminator (encoded) form."""
        widget = self.finalize()
        payload = widget_to_client(widget)
        logger.info(f"[Wizard] Created {payload['type']} widget '{widget.title}'")
        self.reset()
        return payload

    def _build_settings(self) -> WidgetSettings:
        kind = self.kind
        if kind == "stat":
            return StatSettings(
                calculation_type=self.calculation_type,
                y_axis_key=self.y_axis_key,
            )
        if kind in AXIS_CHART_KINDS:
            return AxisChartSettings(
                x_axis_key=self.x_axis_key,
                y_axis_key=self.y_axis_key,
                aggregate_type=self.aggregate_type,
                color=self.color,
            )
        if kind == "scatter":
            return ScatterSettings(
                x_axis_key=self.x_axis_key,
                y_axis_key=self.y_axis_key,
                color=self.color,
            )
        if kind == "list":
            return ListSettings(data_keys=tuple(self.data_keys))
        if kind == "latestOperations":
            return OperationSettings(operation_type=self.operation_type)
        return FixedFeedSettings()

    # ── Labels ───────────────────────────────────────────────────

    @property
    def table_label(self) -> str:
        for table in self.tables:
            if table.table_name == self.table:
                return table.display_name
        return self.table or ""

    def column_label(self, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        for column in self.columns:
            if column.name == name:
                return column.label
        return name

    # ── Guards ───────────────────────────────────────────────────

    def _require_step(self, step: str) -> None:
        if self.step != step:
            raise WizardError(f"Not allowed at step '{self.step}' (expected '{step}')")

    def _require_table_step(self) -> None:
        self._require_step(WizardStep.CONFIGURE_DATA)
        if self.kind == "latestOperations":
            raise WizardError("latestOperations widgets pick an operation, not a table")

    def _require_field(self, kinds: Iterable[str], what: str) -> None:
        self._require_step(WizardStep.CONFIGURE_DATA)
        if self.kind not in kinds:
            raise WizardError(f"'{self.kind}' widgets have no {what} field")

    def _check_option(self, picker: str, name: Optional[str]) -> None:
        """Reject columns outside the picker once the table's columns are known."""
        if not name or not self.columns:
            return
        options = self.field_options().get(picker, [])
        if name not in options:
            raise WizardError(f"Column '{name}' is not a valid {picker} field for '{self.kind}'")

    # ─────────────────────────────────────────────────────────────
    #  NON-INTERACTIVE
    # ─────────────────────────────────────────────────────────────

    @classmethod
    def from_draft(
        cls,
        draft: Dict[str, Any],
        tables: Optional[Iterable[TableInfo]] = None,
        columns: Optional[Iterable[ColumnInfo]] = None,
    ) -> "WidgetWizard":
        """
        Replay a client draft through the wizard, ending at ``finalize``.

        ``draft`` uses the client shape (``type``, ``dataSource``,
        ``title``, ``settings``, ``gridSpan``); the type may be an
        encoded stat tag.
        """
        settings = dict(draft.get("settings") or {})
        kind, mode = decode_type(draft.get("type") or "", settings.get("calculationType"))

        wizard = cls()
        if tables:
            wizard.use_tables(tables)
        wizard.select_visualization(kind)

        if wizard.step == WizardStep.CONFIGURE_DATA:
            if kind == "latestOperations":
                if settings.get("operationType"):
                    wizard.select_operation(settings["operationType"])
            else:
                source = draft.get("dataSource") or draft.get("data_source")
                if source:
                    wizard.use_table(source, columns or [])
                wizard._apply_settings(kind, mode, settings)
            wizard.proceed()

        wizard.set_title(draft.get("title"))
        if "gridSpan" in draft or "grid_span" in draft:
            wizard.set_grid_span(int(draft.get("gridSpan") or draft.get("grid_span") or 1))
        return wizard

    def _apply_settings(self, kind: str, mode: Optional[str], settings: Dict[str, Any]) -> None:
        if kind == "stat":
            self.set_calculation_type(mode or "count")
        if kind in AXIS_CHART_KINDS:
            self.set_aggregate_type(
                settings.get("aggregateType") or settings.get("calculationType") or "count"
            )
        if kind in _X_AXIS_KINDS and settings.get("xAxisKey"):
            self.set_x_axis(settings["xAxisKey"])
        if kind in _Y_AXIS_KINDS and settings.get("yAxisKey"):
            self.set_y_axis(settings["yAxisKey"])
        if kind == "list":
            self.set_data_keys(settings.get("dataKeys") or [])
        if settings.get("color"):
            self.set_color(settings["color"])
