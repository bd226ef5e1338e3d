"""System endpoints — health check, widget catalog, feed definitions."""

from fastapi import APIRouter, Depends

from smart_widgets.api.v1.dependencies import get_column_cache, get_dashboard
from smart_widgets.config.widget_registry import WIDGET_CATALOG, WIDGET_REGISTRY
from smart_widgets.core.cache import ColumnCache
from smart_widgets.core.config import settings
from smart_widgets.services.orchestrator.dashboard import DashboardService
from smart_widgets.services.widgets.feeds import feed_config

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def health_check(
    cache: ColumnCache = Depends(get_column_cache),
    dashboard: DashboardService = Depends(get_dashboard),
):
    """Basic liveness probe."""
    return {
        "status": "ok",
        "backend": settings.backend_url(""),
        "widget_count": len(dashboard.widgets),
        "column_cache": cache.get_cache_info(),
    }


@router.get("/kinds")
async def widget_kinds():
    """Every widget kind the wizard offers, with its renderer category."""
    return {
        "kinds": [
            {
                "kind": kind,
                "label": meta["label"],
                "icon": meta["icon"],
                "category": WIDGET_REGISTRY[kind]["category"],
                "simulatable": WIDGET_REGISTRY[kind]["simulatable"],
            }
            for kind, meta in WIDGET_CATALOG.items()
        ],
    }


@router.get("/feeds")
async def feed_operations():
    """Sub-operations available to ``latestOperations`` widgets."""
    return {
        "operations": [
            {"key": op.key, "label": op.label, "icon": op.icon, "data_source": op.data_source}
            for op in feed_config.operations()
        ],
    }


@router.post("/feeds/reload")
async def feed_reload():
    """Re-read ``feed_operations.yml``."""
    feed_config.reload()
    return {"status": "reloaded", "operations": len(feed_config.operations())}
