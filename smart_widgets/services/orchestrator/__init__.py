"""
Orchestrator package — the dashboard page.

Modules:
  dashboard  — DashboardService: widget list, fetch, render, stat cards
  assembler  — Response JSON assembly

Usage::

    from smart_widgets.services.orchestrator import dashboard_service

    page = await dashboard_service.render_all(time_range="7d")
"""

from smart_widgets.services.orchestrator.assembler import ResponseAssembler
from smart_widgets.services.orchestrator.dashboard import (
    DashboardService,
    dashboard_service,
)

__all__ = [
    "DashboardService",
    "dashboard_service",
    "ResponseAssembler",
]
