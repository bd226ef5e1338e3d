"""
Feed: Latest operations — four fixed-shape sub-feeds selected by
``operation_type``:

  latestTransfers   stock pickings with a state theme
  latestActivities  stock moves classified in / out / adjust
  suppliers         partners with their supplier / customer role
  lowStock          products against their reordering minimum

Rows follow the ERP's conventions: many2one fields arrive either as
``[id, name]`` pairs or as ``{field}`` + ``{field}_name``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from smart_widgets.services.widgets.base import BaseWidget, WidgetResult
from smart_widgets.services.widgets.feeds import FeedOperation, feed_config
from smart_widgets.services.widgets.helpers import time_ago

# ── Themes ───────────────────────────────────────────────────────

TRANSFER_THEMES = {
    "done": {"label": "Completed", "color": "#10b981", "icon": "CheckCircle2"},
    "ready": {"label": "Ready", "color": "#3b82f6", "icon": "Clock"},
    "cancelled": {"label": "Cancelled", "color": "#ef4444", "icon": "XCircle"},
    "draft": {"label": "Draft", "color": "#f59e0b", "icon": "FileText"},
}

_TRANSFER_STATE_ALIASES = {
    "done": "done",
    "ready": "ready",
    "assigned": "ready",
    "confirmed": "ready",
    "cancel": "cancelled",
    "cancelled": "cancelled",
}

ACTIVITY_THEMES = {
    "in": {"action": "Stock Received", "color": "#10b981", "icon": "TrendingUp"},
    "out": {"action": "Order Shipped", "color": "#3b82f6", "icon": "Truck"},
    "adjust": {"action": "Stock Adjusted", "color": "#f59e0b", "icon": "BarChart3"},
}

PARTNER_THEMES = {
    "Both": {"color": "#a78bfa", "icon": "Star"},
    "Supplier": {"color": "#3b82f6", "icon": "Truck"},
    "Customer": {"color": "#10b981", "icon": "User"},
    "Other": {"color": "#f59e0b", "icon": "User"},
}


def transfer_theme(state: Optional[str]) -> Dict[str, str]:
    """Theme for a picking state; anything unrecognised is a draft."""
    return TRANSFER_THEMES[_TRANSFER_STATE_ALIASES.get(state or "draft", "draft")]


def _many2one(value: Any) -> tuple:
    """``[id, name]`` → ``(id, name)``; scalars → ``(value, None)``."""
    if isinstance(value, (list, tuple)) and len(value) >= 2:
        return value[0], value[1]
    return value, None


def _number_or(value: Any, default: float) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return default


def activity_direction(move: Dict[str, Any]) -> str:
    _, source = _many2one(move.get("location_id"))
    _, dest = _many2one(move.get("location_dest_id"))
    source = str(source or "").lower()
    dest = str(dest or "").lower()

    if "supplier" in source or "vendor" in source:
        return "in"
    if "customer" in dest or "client" in dest:
        return "out"
    if move.get("picking_code") == "incoming":
        return "in"
    if move.get("picking_code") == "outgoing":
        return "out"
    return "adjust"


def partner_role(partner: Dict[str, Any]) -> str:
    is_supplier = _number_or(partner.get("supplier_rank"), 0) > 0
    is_customer = _number_or(partner.get("customer_rank"), 0) > 0
    if is_supplier and is_customer:
        return "Both"
    if is_supplier:
        return "Supplier"
    if is_customer:
        return "Customer"
    return "Other"


class LatestOperationsFeed(BaseWidget):

    def process(self) -> WidgetResult:
        operation_type = self.settings.operation_type
        if not operation_type:
            return self._placeholder("Please configure operation type")

        operation = feed_config.get_operation(operation_type)
        if not self.rows:
            return self._empty(operation.empty_message if operation else "No data available")

        shapers: Dict[str, Callable[[], List[Dict[str, Any]]]] = {
            "latestTransfers": self._transfers,
            "latestActivities": self._activities,
            "suppliers": self._suppliers,
            "lowStock": lambda: self._low_stock(operation),
        }
        items = shapers[operation_type]()

        return self._result(
            {"operation_type": operation_type, "items": items, "total": len(items)},
        )

    # ── Sub-feeds ────────────────────────────────────────────────

    def _transfers(self) -> List[Dict[str, Any]]:
        items = []
        for idx, picking in enumerate(self.rows):
            state = picking.get("state") or "draft"
            theme = transfer_theme(state)
            items.append({
                "key": picking.get("id") or idx,
                "name": picking.get("name") or f"#{picking.get('id')}",
                "state": state,
                "status_label": theme["label"],
                "color": theme["color"],
                "icon": theme["icon"],
            })
        return items

    def _activities(self) -> List[Dict[str, Any]]:
        now = self.display.current_time()
        items = []
        for idx, move in enumerate(self.rows):
            product_id, product_name = _many2one(move.get("product_id"))
            if product_name is None:
                product_name = move.get("product_id_name") or "Unknown"
            qty = _number_or(move.get("product_uom_qty"), _number_or(move.get("quantity"), 0))

            direction = activity_direction(move)
            theme = ACTIVITY_THEMES[direction]
            items.append({
                "key": move.get("id") or idx,
                "product_id": product_id,
                "product": product_name,
                "quantity": qty,
                "direction": direction,
                "action": theme["action"],
                "description": f"{product_name} ({qty:g} units)",
                "time": time_ago(move.get("date"), now),
                "color": theme["color"],
                "icon": theme["icon"],
            })
        return items

    def _suppliers(self) -> List[Dict[str, Any]]:
        items = []
        for idx, partner in enumerate(self.rows):
            role = partner_role(partner)
            theme = PARTNER_THEMES[role]
            items.append({
                "key": partner.get("id") or idx,
                "name": partner.get("name") or f"#{partner.get('id')}",
                "email": partner.get("email") or "-",
                "phone": partner.get("phone") or partner.get("mobile") or "-",
                "role": role,
                "color": theme["color"],
                "icon": theme["icon"],
            })
        return items

    def _low_stock(self, operation: Optional[FeedOperation]) -> List[Dict[str, Any]]:
        ratio = operation.critical_ratio if operation else 0.3
        default_min = operation.default_min_qty if operation else 50

        items = []
        for idx, product in enumerate(self.rows):
            qty = _number_or(product.get("qty_available"), 0)
            min_qty = _number_or(
                product.get("reordering_min_qty"),
                _number_or(product.get("min_qty"), default_min),
            )
            items.append({
                "key": product.get("id") or idx,
                "name": product.get("name") or f"#{product.get('id')}",
                "sku": product.get("default_code") or product.get("barcode") or f"SKU-{product.get('id')}",
                "qty_available": qty,
                "min_qty": min_qty,
                "status": "critical" if qty < min_qty * ratio else "warning",
            })
        return items
