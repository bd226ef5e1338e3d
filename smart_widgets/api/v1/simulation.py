"""
Simulation API — what-if edits on a chart widget's data.

  POST   /simulations/{widget_id}   → open (fetches the widget's rows)
  GET    /simulations/{widget_id}   → editable fields + current render
  PATCH  /simulations/{widget_id}   → set one field, re-render
  DELETE /simulations/{widget_id}   → close, buffer discarded
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from smart_widgets.api.v1.dependencies import (
    backend_failure,
    get_dashboard,
    get_simulations,
    require_widget,
)
from smart_widgets.core.errors import SimulationError
from smart_widgets.models.widget import WidgetConfig
from smart_widgets.services.orchestrator.dashboard import DashboardService
from smart_widgets.services.simulation.session import SimulationRegistry, SimulationSession

router = APIRouter(prefix="/simulations", tags=["simulations"])


class FieldEdit(BaseModel):
    row_index: int
    field: str
    value: Any = None


def _state(session: SimulationSession) -> Dict[str, Any]:
    return {
        "widget_id": session.widget.id,
        "fields": session.editable_fields(),
        "result": session.render().to_dict(),
    }


def _open_session(registry: SimulationRegistry, widget_id: str) -> SimulationSession:
    session = registry.get(widget_id)
    if session is None:
        raise HTTPException(status_code=409, detail=f"No open simulation for '{widget_id}'")
    return session


@router.post("/{widget_id}")
async def open_simulation(
    time_range: str = Query("all"),
    widget: WidgetConfig = Depends(require_widget),
    dashboard: DashboardService = Depends(get_dashboard),
    registry: SimulationRegistry = Depends(get_simulations),
):
    if not widget.is_chart:
        raise HTTPException(
            status_code=409,
            detail=f"Simulation is only available for charts, not '{widget.type}'",
        )

    existing = registry.get(widget.id)
    if existing is not None:
        return _state(existing)

    result = await dashboard.fetch_rows(widget, time_range)
    if not result["ok"]:
        raise backend_failure(result)

    try:
        session = registry.open(widget, result["data"], ctx=dashboard.ctx)
    except SimulationError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return _state(session)


@router.get("/{widget_id}")
async def simulation_state(
    widget_id: str,
    registry: SimulationRegistry = Depends(get_simulations),
):
    return _state(_open_session(registry, widget_id))


@router.patch("/{widget_id}")
async def edit_simulation(
    widget_id: str,
    edit: FieldEdit,
    registry: SimulationRegistry = Depends(get_simulations),
):
    """Non-numeric values become 0; an index outside the rows changes nothing."""
    session = _open_session(registry, widget_id)
    applied = session.set_field(edit.row_index, edit.field, edit.value)
    return {"applied": applied, **_state(session)}


@router.delete("/{widget_id}")
async def close_simulation(
    widget_id: str,
    registry: SimulationRegistry = Depends(get_simulations),
):
    return {"closed": registry.close(widget_id), "widget_id": widget_id}
