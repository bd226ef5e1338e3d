"""Stat summary endpoint — the stat card row at the top of the dashboard."""

from fastapi import APIRouter, Depends, Query

from smart_widgets.api.v1.dependencies import get_dashboard
from smart_widgets.services.orchestrator.dashboard import DashboardService

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/summary")
async def stat_summary(
    time_range: str = Query("all"),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """One ``{value, label, icon, gradient}`` card per stat widget, fetched in parallel."""
    summaries = await dashboard.summarize_stats(time_range)
    return {
        "time_range": time_range,
        "stats": {wid: s.to_dict() for wid, s in summaries.items()},
    }
