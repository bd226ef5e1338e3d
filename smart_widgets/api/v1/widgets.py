"""
Widgets API — the dashboard's widget list.

  GET    /widgets                   → current widgets (client shape)
  GET    /widgets/render            → whole page: grid widgets + stat cards
  POST   /widgets                   → create from a draft through the wizard
  GET    /widgets/{id}              → one widget
  DELETE /widgets/{id}              → remove
  PUT    /widgets/{id}/stat         → dedicated stat-card edit
  POST   /widgets/{id}/render       → fetch + render one widget
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from smart_widgets.api.v1.dependencies import (
    get_client,
    get_column_cache,
    get_dashboard,
    require_widget,
)
from smart_widgets.core.cache import ColumnCache
from smart_widgets.core.errors import WidgetConfigError, WizardError, WizardValidationError
from smart_widgets.models.columns import ColumnInfo, TableInfo
from smart_widgets.models.widget import FIXED_SOURCE_KINDS, WidgetConfig
from smart_widgets.services.broker.backend_client import BackendClient
from smart_widgets.services.codec import decode_type
from smart_widgets.services.normalizer import widget_to_client
from smart_widgets.services.orchestrator.dashboard import DashboardService
from smart_widgets.services.wizard.machine import WidgetWizard

router = APIRouter(prefix="/widgets", tags=["widgets"])


# ── Pydantic request models ─────────────────────────────────────

class WidgetDraft(BaseModel):
    """Client-shape widget draft; ``type`` may be an encoded stat tag."""
    type: str
    title: Optional[str] = None
    dataSource: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    gridSpan: int = 1


class StatEditRequest(BaseModel):
    title: Optional[str] = None
    dataSource: str
    calculationType: str = "count"
    valueKey: Optional[str] = None


# ── Helpers ──────────────────────────────────────────────────────

async def _tables(client: BackendClient) -> List[TableInfo]:
    result = await client.list_tables()
    return result["data"] if result["ok"] else []


async def _columns(table: str, client: BackendClient, cache: ColumnCache) -> List[ColumnInfo]:
    """Known columns of *table*; an unreachable backend means no column checks."""
    cached = cache.peek(table)
    if cached is not None:
        return cached
    result = await client.list_columns(table)
    if not result["ok"]:
        return []
    cache.put(table, result["data"])
    return result["data"]


def _table_label(tables: List[TableInfo], name: str) -> str:
    for table in tables:
        if table.table_name == name:
            return table.display_name
    return name


# ── Endpoints ────────────────────────────────────────────────────

@router.get("")
async def list_widgets(
    reload: bool = Query(False, description="Re-read the list from the backend"),
    dashboard: DashboardService = Depends(get_dashboard),
):
    if reload:
        await dashboard.load()
    return {
        "total": len(dashboard.widgets),
        "widgets": [widget_to_client(w) for w in dashboard.widgets],
    }


@router.get("/render")
async def render_page(
    time_range: str = Query("all"),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Every grid widget rendered, plus the stat card row."""
    return await dashboard.render_all(time_range)


@router.post("", status_code=201)
async def create_widget(
    draft: WidgetDraft,
    client: BackendClient = Depends(get_client),
    cache: ColumnCache = Depends(get_column_cache),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """
    Replay *draft* through the creation wizard and add the result.

    Field selections are checked against the table's columns when the
    backend can list them.
    """
    kind, _ = decode_type(draft.type)
    columns: List[ColumnInfo] = []
    if draft.dataSource and kind not in FIXED_SOURCE_KINDS:
        columns = await _columns(draft.dataSource, client, cache)

    try:
        wizard = WidgetWizard.from_draft(
            draft.model_dump(), await _tables(client), columns,
        )
        widget = wizard.finalize()
    except WizardValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors)
    except (WizardError, WidgetConfigError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    stored = await dashboard.add(widget)
    return widget_to_client(stored)


@router.get("/{widget_id}")
async def get_widget(widget: WidgetConfig = Depends(require_widget)):
    return widget_to_client(widget)


@router.delete("/{widget_id}")
async def delete_widget(
    widget: WidgetConfig = Depends(require_widget),
    dashboard: DashboardService = Depends(get_dashboard),
):
    await dashboard.remove(widget.id)
    return {"status": "removed", "id": widget.id}


@router.put("/{widget_id}/stat")
async def edit_stat_widget(
    body: StatEditRequest,
    widget: WidgetConfig = Depends(require_widget),
    client: BackendClient = Depends(get_client),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Change a stat card's title, table, calculation mode and value field."""
    table_label = _table_label(await _tables(client), body.dataSource)
    try:
        updated = await dashboard.edit_stat(
            widget.id,
            title=body.title,
            data_source=body.dataSource,
            calculation_type=body.calculationType,
            value_key=body.valueKey,
            table_label=table_label,
        )
    except WidgetConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return widget_to_client(updated)


@router.post("/{widget_id}/render")
async def render_widget(
    time_range: str = Query("all"),
    widget: WidgetConfig = Depends(require_widget),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Fetch and render one widget; a fetch failure comes back as an error result."""
    result = await dashboard.render(widget.id, time_range)
    return result.to_dict()
