"""
FeedConfig — YAML loader for feed widget definitions.

Single Responsibility: parse ``feed_operations.yml`` into typed
dataclasses.  No HTTP calls, no rendering.

Usage::

    from smart_widgets.services.widgets.feeds import feed_config

    op = feed_config.get_operation("suppliers")   # FeedOperation | None
    op.data_source                                 # "res_partner"
    fixed = feed_config.get_fixed("lowStock")      # FixedFeed | None
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

# Path to the YAML config file (relative to smart_widgets/config/)
_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "feed_operations.yml"


# ── Dataclasses ──────────────────────────────────────────────────

@dataclass(frozen=True)
class FeedOperation:
    """One ``latestOperations`` sub-operation."""
    key: str
    label: str
    data_source: str
    title: str
    empty_message: str
    icon: Optional[str] = None
    critical_ratio: float = 0.3
    default_min_qty: float = 50


@dataclass(frozen=True)
class FixedFeed:
    """A widget kind with a fixed data source."""
    kind: str
    data_source: str
    title: str
    empty_message: str
    stock_threshold: float = 20
    max_items: int = 50


# ── Loader ───────────────────────────────────────────────────────

class FeedConfigLoader:
    """
    Loads and caches the parsed feed definitions from YAML.

    The YAML is read once on first access and cached in memory.
    Call ``reload()`` to re-read after manual edits.
    """

    def __init__(self, config_path: Path = _CONFIG_PATH):
        self._config_path = config_path
        self._operations: Dict[str, FeedOperation] = {}
        self._fixed: Dict[str, FixedFeed] = {}
        self._loaded = False

    def operations(self) -> List[FeedOperation]:
        """All sub-operations, in file order."""
        self._ensure_loaded()
        return list(self._operations.values())

    def get_operation(self, key: Optional[str]) -> Optional[FeedOperation]:
        self._ensure_loaded()
        return self._operations.get(key) if key else None

    def get_fixed(self, kind: str) -> Optional[FixedFeed]:
        self._ensure_loaded()
        return self._fixed.get(kind)

    def reload(self) -> None:
        """Force re-read of the YAML file."""
        self._loaded = False
        self._operations.clear()
        self._fixed.clear()
        self._ensure_loaded()

    # ── Internal ─────────────────────────────────────────────────

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._load()
        self._loaded = True

    def _load(self) -> None:
        if not self._config_path.exists():
            logger.warning(f"[FeedConfig] Config file not found: {self._config_path}")
            return

        with open(self._config_path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

        for key, entry in (raw.get("operations") or {}).items():
            try:
                self._operations[key] = self._parse_operation(key, entry)
            except (KeyError, TypeError, ValueError) as exc:
                logger.error(f"[FeedConfig] Invalid operation '{key}': {exc}")

        for kind, entry in (raw.get("fixed_feeds") or {}).items():
            try:
                self._fixed[kind] = self._parse_fixed(kind, entry)
            except (KeyError, TypeError, ValueError) as exc:
                logger.error(f"[FeedConfig] Invalid fixed feed '{kind}': {exc}")

        logger.info(
            f"[FeedConfig] Loaded {len(self._operations)} operation(s), "
            f"{len(self._fixed)} fixed feed(s)"
        )

    @staticmethod
    def _parse_operation(key: str, entry: Dict[str, Any]) -> FeedOperation:
        return FeedOperation(
            key=key,
            label=entry.get("label", key),
            data_source=entry["data_source"],
            title=entry.get("title", entry.get("label", key)),
            empty_message=entry.get("empty_message", "No data available"),
            icon=entry.get("icon"),
            critical_ratio=float(entry.get("critical_ratio", 0.3)),
            default_min_qty=float(entry.get("default_min_qty", 50)),
        )

    @staticmethod
    def _parse_fixed(kind: str, entry: Dict[str, Any]) -> FixedFeed:
        return FixedFeed(
            kind=kind,
            data_source=entry["data_source"],
            title=entry["title"],
            empty_message=entry.get("empty_message", "No data available"),
            stock_threshold=float(entry.get("stock_threshold", 20)),
            max_items=int(entry.get("max_items", 50)),
        )


# ── Singleton ────────────────────────────────────────────────────
feed_config = FeedConfigLoader()
