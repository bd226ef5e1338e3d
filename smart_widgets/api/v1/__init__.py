"""
API v1 — Router aggregation.
"""

from fastapi import APIRouter

from smart_widgets.api.v1.system import router as system_router
from smart_widgets.api.v1.tables import router as tables_router
from smart_widgets.api.v1.widgets import router as widgets_router
from smart_widgets.api.v1.stats import router as stats_router
from smart_widgets.api.v1.simulation import router as simulation_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(system_router)
api_router.include_router(tables_router)
api_router.include_router(widgets_router)
api_router.include_router(stats_router)
api_router.include_router(simulation_router)
