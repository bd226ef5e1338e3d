"""
ColumnCache — session cache for the selected table's column metadata.

Holds the columns of exactly one table.  Asking for the same table
again is served from memory; asking for a different table drops the
previous entry and loads the new one.

Usage::

    from smart_widgets.core.cache import ColumnCache

    cache = ColumnCache()
    columns = await cache.get_or_load("sale_order", client_loader)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from smart_widgets.models.columns import ColumnInfo

logger = logging.getLogger(__name__)

ColumnLoader = Callable[[str], Awaitable[List[ColumnInfo]]]


@dataclass
class CacheEntry:
    """Container for a cached column list with load-time metadata."""
    table: str
    columns: List[ColumnInfo]
    loaded_at: datetime = field(default_factory=datetime.now)

    @property
    def age_seconds(self) -> float:
        return (datetime.now() - self.loaded_at).total_seconds()


class ColumnCache:

    def __init__(self) -> None:
        self._entry: Optional[CacheEntry] = None
        self._lock = asyncio.Lock()

    @property
    def current_table(self) -> Optional[str]:
        return self._entry.table if self._entry else None

    def peek(self, table: str) -> Optional[List[ColumnInfo]]:
        """Cached columns for *table*, or ``None`` without loading."""
        if self._entry and self._entry.table == table:
            return list(self._entry.columns)
        return None

    def put(self, table: str, columns: List[ColumnInfo]) -> None:
        self._entry = CacheEntry(table=table, columns=list(columns))

    async def get_or_load(self, table: str, loader: ColumnLoader) -> List[ColumnInfo]:
        async with self._lock:
            cached = self.peek(table)
            if cached is not None:
                logger.debug(f"[ColumnCache] hit for '{table}'")
                return cached

            if self._entry is not None:
                logger.debug(
                    f"[ColumnCache] table changed "
                    f"'{self._entry.table}' -> '{table}', invalidating"
                )
            self._entry = None
            columns = await loader(table)
            self.put(table, columns)
            return list(columns)

    def invalidate(self) -> None:
        self._entry = None

    def get_cache_info(self) -> Dict[str, Any]:
        if self._entry is None:
            return {"table": None}
        return {
            "table": self._entry.table,
            "count": len(self._entry.columns),
            "loaded_at": self._entry.loaded_at.isoformat(),
            "age_seconds": round(self._entry.age_seconds, 1),
        }


# ── Singleton ────────────────────────────────────────────────────
column_cache = ColumnCache()
