from __future__ import annotations

from .line_item import LineItem, normalize_items
from .status import (
    DEFAULT_ORDER_STATUS,
    DEFAULT_PO_STATUS,
    OrderStatus,
    PurchaseOrderType,
    is_invoiced,
    known_order_status,
    order_status_for_po,
)
