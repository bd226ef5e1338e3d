"""Feed: Low stock alerts — inventory items below the stock threshold."""

from smart_widgets.services.widgets.base import BaseWidget, WidgetResult
from smart_widgets.services.widgets.feeds import feed_config
from smart_widgets.services.widgets.helpers import to_number


class LowStockFeed(BaseWidget):

    def process(self) -> WidgetResult:
        feed = feed_config.get_fixed("lowStock")
        threshold = feed.stock_threshold if feed else 20
        empty_message = feed.empty_message if feed else "No critical stock levels."

        items = []
        for idx, row in enumerate(self.rows):
            stock = to_number(row.get("stock"))
            if stock is None or stock >= threshold:
                continue
            items.append({
                "key": f"{row.get('id')}-{idx}",
                "product": row.get("product"),
                "category": row.get("category"),
                "stock": stock,
            })

        if not items:
            return self._empty(empty_message)

        return self._result({"items": items, "total": len(items)}, threshold=threshold)
