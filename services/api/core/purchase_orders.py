# services/api/core/purchase_orders.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from adapters.base import DocumentStore, PURCHASE_ORDERS
from core.errors import NotFound
from core.identifiers import new_document_id, utc_iso
from core.orders import OrderRepository, sort_newest_first
from core.validation import normalize_strings_upper, parse_payload
from models.status import DEFAULT_PO_STATUS, PurchaseOrderType, order_status_for_po
from schemas.order import PurchaseOrderCreate, PurchaseOrderUpdate

logger = logging.getLogger(__name__)


def _sync_result(synced: bool, reason: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = {"synced": synced}
    if reason:
        out["reason"] = reason
    out.update(extra)
    return out


class PurchaseOrderService:
    """
    Purchase orders plus one-way propagation of their vendor/status fields
    onto the linked Order.

    Every create/update response carries `orderSync`, which says whether
    the linked Order was touched and, if not, why. A missing Order never
    fails the PO write.
    """

    def __init__(
        self,
        store: DocumentStore,
        orders: Optional[OrderRepository] = None,
        clock: Callable[[], str] = utc_iso,
    ):
        self.store = store
        self.orders = orders or OrderRepository(store, clock=clock)
        self.clock = clock

    # ---------- read ----------

    def get(self, po_id: str) -> Dict[str, Any]:
        po = self.store.get(PURCHASE_ORDERS, po_id)
        if po is None:
            raise NotFound("Purchase order not found", collection=PURCHASE_ORDERS, key=po_id)
        return {**po, "id": po_id}

    def list(self) -> List[Dict[str, Any]]:
        pos = []
        for key in self.store.list_keys(PURCHASE_ORDERS):
            data = self.store.get(PURCHASE_ORDERS, key)
            if data:
                pos.append({**data, "id": key})
        return sort_newest_first(pos)

    # ---------- write ----------

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = parse_payload(PurchaseOrderCreate, normalize_strings_upper(payload))

        po_id = new_document_id("po", sep="-")
        po = {
            "id": po_id,
            "orderId": body.orderId or "",
            "orderNumber": body.orderNumber or "",
            "dateOrdered": body.dateOrdered or "",
            "requestedDate": body.requestedDate or body.dateOrdered or "",
            "poNumber": body.poNumber or "",
            "vendor": body.vendor or "",
            "poType": (body.poType or PurchaseOrderType.EXTERNAL.value).lower(),
            "deliveryDate": body.deliveryDate or "",
            "receivedAt": body.receivedAt or "",
            "status": body.status or DEFAULT_PO_STATUS,
            "syncToOrder": body.syncToOrder is not False,
            "items": body.items or [],
            "createdAt": self.clock(),
        }

        self.store.set(PURCHASE_ORDERS, po_id, po)
        logger.info(f"✓ Created purchase order {po['poNumber'] or po_id} for order {po['orderId'] or '-'}")

        return {**po, "orderSync": self.sync_to_order(po)}

    def update(self, po_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        existing = self.store.get(PURCHASE_ORDERS, po_id)
        if existing is None:
            raise NotFound("Purchase order not found", collection=PURCHASE_ORDERS, key=po_id)

        changes = parse_payload(
            PurchaseOrderUpdate, normalize_strings_upper(patch)
        ).model_dump(exclude_unset=True)
        if changes.get("poType"):
            changes["poType"] = str(changes["poType"]).lower()

        updated = {**existing, **changes, "id": po_id, "updatedAt": self.clock()}
        self.store.set(PURCHASE_ORDERS, po_id, updated)

        return {**updated, "orderSync": self.sync_to_order(updated, keep_existing=True)}

    def delete(self, po_id: str) -> None:
        self.store.delete(PURCHASE_ORDERS, po_id)

    # ---------- sync ----------

    def sync_to_order(self, po: Dict[str, Any], keep_existing: bool = False) -> Dict[str, Any]:
        """
        Push PO status and vendor fields onto the linked Order.

        With keep_existing, blank PO values leave the Order's current values
        in place instead of clearing them.
        """
        if po.get("syncToOrder") is False:
            return _sync_result(False, "syncToOrder disabled")

        order_id = po.get("orderId")
        if not order_id:
            return _sync_result(False, "No linked order")

        order = self.orders.load(order_id)
        if order is None:
            logger.warning(f"PO {po.get('id')} references missing order {order_id}; order not synced")
            return _sync_result(False, "Linked order not found", orderId=order_id)

        def pick(po_value: Any, order_key: str) -> Any:
            if keep_existing:
                return po_value or order.get(order_key) or ""
            return po_value or ""

        new_status = order_status_for_po(po.get("poType"), po.get("status")).value
        order.update({
            "status": new_status,
            "vendorName": pick(po.get("vendor"), "vendorName"),
            "vendorPoNumber": pick(po.get("poNumber"), "vendorPoNumber"),
            "requestedDate": pick(po.get("requestedDate"), "requestedDate"),
            "vendorDeliveryDate": pick(po.get("deliveryDate"), "vendorDeliveryDate"),
            "vendorReceivedAt": pick(po.get("receivedAt"), "vendorReceivedAt"),
            "updatedAt": self.clock(),
        })
        self.orders.save(order_id, order)

        logger.info(f"✓ Synced PO {po.get('id')} -> order {order_id} ({new_status})")
        return _sync_result(True, orderId=order_id, status=new_status)
