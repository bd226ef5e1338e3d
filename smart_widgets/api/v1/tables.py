"""
Tables API — data-source picker and column metadata for the wizard.

Columns are served through the session ``ColumnCache``: asking for the
same table twice hits memory, a different table replaces the entry.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from smart_widgets.api.v1.dependencies import backend_failure, get_client, get_column_cache
from smart_widgets.core.cache import ColumnCache
from smart_widgets.core.errors import WizardError
from smart_widgets.models.columns import ColumnInfo
from smart_widgets.services.broker.backend_client import BackendClient
from smart_widgets.services.columns.classifier import classify_columns
from smart_widgets.services.wizard.machine import WidgetWizard

router = APIRouter(prefix="/tables", tags=["tables"])


async def _load_columns(name: str, client: BackendClient, cache: ColumnCache) -> List[ColumnInfo]:
    async def loader(table: str) -> List[ColumnInfo]:
        result = await client.list_columns(table)
        if not result["ok"]:
            raise backend_failure(result)
        return result["data"]

    return await cache.get_or_load(name, loader)


@router.get("")
async def list_tables(
    search: str = Query("", description="Case-insensitive name filter"),
    client: BackendClient = Depends(get_client),
):
    """Tables available as widget data sources."""
    result = await client.list_tables()
    if not result["ok"]:
        raise backend_failure(result)

    needle = search.lower()
    tables = [
        t for t in result["data"]
        if needle in t.display_name.lower() or needle in t.table_name.lower()
    ]
    return {"total": len(tables), "tables": [t.to_dict() for t in tables]}


@router.get("/{name}/columns")
async def list_columns(
    name: str,
    client: BackendClient = Depends(get_client),
    cache: ColumnCache = Depends(get_column_cache),
):
    """Columns of *name* with their numeric / date-like / other partition."""
    columns = await _load_columns(name, client, cache)
    classification = classify_columns(columns)
    return {
        "table": name,
        "columns": [c.to_dict() for c in columns],
        "classification": {
            "numeric": list(classification.numeric),
            "date_like": list(classification.date_like),
            "other": list(classification.other),
        },
    }


@router.get("/{name}/fields")
async def field_options(
    name: str,
    kind: str = Query(..., description="Widget kind the fields are picked for"),
    client: BackendClient = Depends(get_client),
    cache: ColumnCache = Depends(get_column_cache),
):
    """Column names each field picker offers for *kind* on *name*."""
    columns = await _load_columns(name, client, cache)
    wizard = WidgetWizard()
    try:
        wizard.select_visualization(kind)
        wizard.use_table(name, columns)
    except WizardError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"table": name, "kind": kind, "fields": wizard.field_options()}
