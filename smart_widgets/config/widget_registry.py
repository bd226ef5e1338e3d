"""
Widget Registry Configuration.

Maps widget kinds (the ``WidgetConfig.type`` vocabulary) to the
renderer class that shapes their data.  This file is the ONLY place
where a kind is bound to a renderer — the ``WidgetEngine`` discovers
the class automatically via the Registry Pattern.

Keys:
  kind → str : one of ``models.widget.WIDGET_KINDS``.

Values: dict with:
  class        → str  : renderer class in ``services/widgets/types/``
                        (module name is the snake_case class name).
  category     → str  : "kpi" | "chart" | "table" | "feed"
  simulatable  → bool : whether the simulation panel may open on it.
  default_config → dict : renderer-specific defaults.

To add a new widget kind:
  1. Create the renderer class in smart_widgets/services/widgets/types/
  2. Add an entry here and in WIDGET_CATALOG.
  3. Add the kind (and its settings variant) to models/widget.py.
"""

WIDGET_REGISTRY: dict[str, dict] = {
    # ── Scalar ───────────────────────────────────────────────
    "stat": {
        "class": "StatCard",
        "category": "kpi",
        "simulatable": False,
        "default_config": {},
    },

    # ── Time series ──────────────────────────────────────────
    "line": {
        "class": "TimeSeriesChart",
        "category": "chart",
        "simulatable": True,
        "default_config": {"palette_index": 0, "fill": False, "point_radius": 4},
    },
    "area": {
        "class": "TimeSeriesChart",
        "category": "chart",
        "simulatable": True,
        "default_config": {"palette_index": 0, "fill": True, "point_radius": 0},
    },
    "sparkline": {
        "class": "TimeSeriesChart",
        "category": "chart",
        "simulatable": True,
        "default_config": {"palette_index": 3, "fill": True, "point_radius": 0},
    },

    # ── Categorical ──────────────────────────────────────────
    "bar": {
        "class": "CategoricalChart",
        "category": "chart",
        "simulatable": True,
        "default_config": {"palette_index": 1, "tick_length": 15},
    },
    "pie": {
        "class": "CategoricalChart",
        "category": "chart",
        "simulatable": True,
        "default_config": {"cutout": "0%", "legend_length": 20},
    },
    "donut": {
        "class": "CategoricalChart",
        "category": "chart",
        "simulatable": True,
        "default_config": {"cutout": "60%", "legend_length": 20},
    },

    # ── Point cloud ──────────────────────────────────────────
    "scatter": {
        "class": "ScatterChart",
        "category": "chart",
        "simulatable": True,
        "default_config": {"palette_index": 2},
    },

    # ── Tables ───────────────────────────────────────────────
    "list": {
        "class": "ItemList",
        "category": "table",
        "simulatable": False,
        "default_config": {},
    },

    # ── Feeds ────────────────────────────────────────────────
    "lowStock": {
        "class": "LowStockFeed",
        "category": "feed",
        "simulatable": False,
        "default_config": {},
    },
    "transfers": {
        "class": "TransfersFeed",
        "category": "feed",
        "simulatable": False,
        "default_config": {},
    },
    "latestOperations": {
        "class": "LatestOperationsFeed",
        "category": "feed",
        "simulatable": False,
        "default_config": {},
    },
}


# Picker entries for the wizard's first step, in display order.
WIDGET_CATALOG: dict[str, dict] = {
    "stat": {"label": "Stat Card", "icon": "Calculator"},
    "line": {"label": "Line Chart", "icon": "ChartLine"},
    "bar": {"label": "Bar Chart", "icon": "BarChart3"},
    "area": {"label": "Area Chart", "icon": "AreaChart"},
    "pie": {"label": "Pie Chart", "icon": "PieChart"},
    "donut": {"label": "Donut Chart", "icon": "CircleDot"},
    "scatter": {"label": "Scatter Plot", "icon": "ScatterChart"},
    "sparkline": {"label": "Sparkline", "icon": "Activity"},
    "list": {"label": "Custom List", "icon": "List"},
    "lowStock": {"label": "Low Stock Alerts", "icon": "AlertTriangle"},
    "transfers": {"label": "Latest Transfers", "icon": "ArrowRightLeft"},
    "latestOperations": {"label": "Latest Operations", "icon": "Activity"},
}
