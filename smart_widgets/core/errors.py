"""
Domain exceptions.

Raised only at the edges that own a decision (config validation,
wizard gate, simulation lifecycle).  Rendering and backend I/O never
raise: they return error results instead.
"""

from __future__ import annotations

from typing import List, Optional


class SmartWidgetError(Exception):
    """Base class for every engine-specific error."""


class WidgetConfigError(SmartWidgetError, ValueError):
    """A widget kind, settings variant, or wire record is invalid."""


class WizardError(SmartWidgetError, ValueError):
    """Illegal wizard transition or field selection."""


class WizardValidationError(WizardError):
    """The wizard's submission gate failed."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid widget configuration")


class SimulationError(SmartWidgetError):
    """Simulation requested for a non-chart widget or a closed session."""

    def __init__(self, message: str, widget_id: Optional[str] = None) -> None:
        self.widget_id = widget_id
        super().__init__(message)


class WidgetNotFoundError(SmartWidgetError, LookupError):
    """No widget with the requested id on the dashboard."""

    def __init__(self, widget_id: str) -> None:
        self.widget_id = widget_id
        super().__init__(f"Widget '{widget_id}' not found")
