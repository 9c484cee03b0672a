# services/api/models/status.py
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class OrderStatus(str, Enum):
    """
    Order status vocabulary shown on shop-floor and office views.

    VENDOR / VENDOR_RECEIVED are legacy values still present on old orders.
    """

    SHOP_PRODUCTION = "shop production"
    ON_ORDER_VENDOR = "on order (vendor)"
    RECEIVED_VENDOR = "received (vendor)"
    COMPLETED = "completed"
    INVOICED = "INVOICED"
    VENDOR = "vendor"
    VENDOR_RECEIVED = "vendor received"


class PurchaseOrderType(str, Enum):
    EXTERNAL = "external"
    INTERNAL = "internal"


DEFAULT_ORDER_STATUS = OrderStatus.SHOP_PRODUCTION.value
DEFAULT_PO_STATUS = "Pending"

PO_STATUS_COMPLETED_BY_SHOP = "completed by shop"
PO_STATUS_RECEIVED = "received"


def po_type_of(value: Any) -> PurchaseOrderType:
    """Missing or unknown PO types are treated as external."""
    text = str(value or PurchaseOrderType.EXTERNAL.value).strip().lower()
    if text == PurchaseOrderType.INTERNAL.value:
        return PurchaseOrderType.INTERNAL
    return PurchaseOrderType.EXTERNAL


def order_status_for_po(po_type: Any, po_status: Any) -> OrderStatus:
    """
    Derive the linked Order's status from a Purchase Order.

        internal + "completed by shop" -> completed
        internal + anything else       -> shop production
        external + "received"          -> received (vendor)
        external + anything else       -> on order (vendor)
    """
    status = str(po_status or "pending").strip().lower()
    if po_type_of(po_type) is PurchaseOrderType.INTERNAL:
        if status == PO_STATUS_COMPLETED_BY_SHOP:
            return OrderStatus.COMPLETED
        return OrderStatus.SHOP_PRODUCTION
    if status == PO_STATUS_RECEIVED:
        return OrderStatus.RECEIVED_VENDOR
    return OrderStatus.ON_ORDER_VENDOR


def known_order_status(value: Any) -> Optional[OrderStatus]:
    """Enum member for a stored status string, or None if out of vocabulary."""
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def is_invoiced(order: dict) -> bool:
    return order.get("status") == OrderStatus.INVOICED.value and bool(order.get("invoiceNumber"))
