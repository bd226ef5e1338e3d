"""
Backend broker.

Modules:
  backend_client : Async HTTP wrapper for the aggregation backend
                   (tables, columns, preview, widget persistence).

Public API::

    from smart_widgets.services.broker import backend_client
"""

from smart_widgets.services.broker.backend_client import BackendClient, backend_client

__all__ = ["BackendClient", "backend_client"]
