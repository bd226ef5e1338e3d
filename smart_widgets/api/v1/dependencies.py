"""
FastAPI dependencies — Shared service handles for the v1 routers.

Single Responsibility: provide reusable FastAPI ``Depends()`` callables
for the service singletons and for widget lookup, so tests can swap
any of them through ``app.dependency_overrides``.

Usage in endpoints::

    @router.delete("/{widget_id}")
    async def delete_widget(
        widget: WidgetConfig = Depends(require_widget),
        dashboard: DashboardService = Depends(get_dashboard),
    ):
        # widget is guaranteed to exist on the dashboard
"""

from __future__ import annotations

from fastapi import Depends, HTTPException

from smart_widgets.core.cache import ColumnCache, column_cache
from smart_widgets.models.widget import WidgetConfig
from smart_widgets.services.broker.backend_client import BackendClient, backend_client
from smart_widgets.services.orchestrator.dashboard import DashboardService, dashboard_service
from smart_widgets.services.simulation.session import SimulationRegistry, simulation_registry


def get_client() -> BackendClient:
    return backend_client


def get_column_cache() -> ColumnCache:
    return column_cache


def get_dashboard() -> DashboardService:
    return dashboard_service


def get_simulations() -> SimulationRegistry:
    return simulation_registry


def require_widget(
    widget_id: str,
    dashboard: DashboardService = Depends(get_dashboard),
) -> WidgetConfig:
    """Dependency: the widget named in the path, or HTTP 404."""
    widget = dashboard.get(widget_id)
    if widget is None:
        raise HTTPException(status_code=404, detail=f"Widget '{widget_id}' not found")
    return widget


def backend_failure(result: dict) -> HTTPException:
    """HTTP 502 carrying the backend client's error text."""
    return HTTPException(
        status_code=502,
        detail=result.get("error") or "Backend request failed",
    )
