# services/api/core/orders.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from adapters.base import DocumentStore, ORDERS
from core.errors import NotFound
from core.identifiers import new_document_id, parse_iso, utc_iso
from core.sequences import SequenceGenerator
from core.validation import coerce_sequence_number, parse_payload
from models.status import DEFAULT_ORDER_STATUS, known_order_status
from schemas.order import OrderCreate, OrderUpdate

logger = logging.getLogger(__name__)

# Legacy deployments kept their counter inside the orders collection.
COUNTER_BLOB_KEY = "_counter"

ORDER_SEQUENCE = "orders"


def order_number_for(sequence_number: int) -> str:
    return f"o{sequence_number}"


def sort_newest_first(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Sort by createdAt descending; undated documents go last."""
    dated = [(parse_iso(d.get("createdAt")), d) for d in docs]
    with_ts = [(ts.timestamp(), d) for ts, d in dated if ts is not None]
    undated = [d for ts, d in dated if ts is None]
    with_ts.sort(key=lambda pair: pair[0], reverse=True)
    return [d for _, d in with_ts] + undated


class OrderRepository:
    """
    CRUD over Order documents. Owns order-number assignment.

    Returned documents always carry their store key as `id`; the stored
    body does not.
    """

    def __init__(
        self,
        store: DocumentStore,
        sequences: Optional[SequenceGenerator] = None,
        clock: Callable[[], str] = utc_iso,
    ):
        self.store = store
        self.sequences = sequences or SequenceGenerator(store)
        self.clock = clock

    # ---------- read ----------

    def load(self, order_id: str) -> Optional[Dict[str, Any]]:
        """Raw stored body (no `id`), or None."""
        if not order_id or order_id == COUNTER_BLOB_KEY:
            return None
        return self.store.get(ORDERS, order_id)

    def get(self, order_id: str) -> Dict[str, Any]:
        order = self.load(order_id)
        if order is None:
            raise NotFound("Order not found", collection=ORDERS, key=order_id)
        return {"id": order_id, **order}

    def list(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        All orders, newest first. `search` is a case-insensitive substring
        match against orderNumber and customer name only.
        """
        orders: List[Dict[str, Any]] = []
        for key in self.store.list_keys(ORDERS):
            if key == COUNTER_BLOB_KEY:
                continue
            data = self.store.get(ORDERS, key)
            if data:
                orders.append({"id": key, **data})

        orders = sort_newest_first(orders)

        if search:
            q = search.lower()
            orders = [
                o for o in orders
                if q in str(o.get("orderNumber") or "").lower()
                or q in str((o.get("customer") or {}).get("name") or "").lower()
            ]
        return orders

    # ---------- write ----------

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = parse_payload(OrderCreate, payload)

        sequence_number = coerce_sequence_number(body.sequenceNumber)
        if sequence_number is None:
            sequence_number = self.sequences.next(ORDER_SEQUENCE)

        order_id = new_document_id("order")
        order = {
            "sequenceNumber": sequence_number,
            "orderNumber": order_number_for(sequence_number),
            "status": body.status or DEFAULT_ORDER_STATUS,
            "vendorName": body.vendorName or "",
            "vendorPoNumber": body.vendorPoNumber or "",
            "requestedDate": body.requestedDate or "",
            "vendorDeliveryDate": body.vendorDeliveryDate or "",
            "vendorReceivedAt": body.vendorReceivedAt or "",
            "customer": body.customer or {},
            "items": body.items or [],
            "hardware": body.hardware or None,
            "hardwareItems": body.hardwareItems or [],
            "specialPricing": body.specialPricing or False,
            "grandTotal": body.grandTotal or 0,
            "grandTotalWithTax": body.grandTotalWithTax or 0,
            "notes": body.notes or "",
            "shopNotes": body.shopNotes or "",
            # date saved: anchors quote validity and invoice-date defaults
            "createdAt": self.clock(),
            "invoiceDate": body.invoiceDate or None,
        }
        if body.terms:
            order["terms"] = body.terms

        self._warn_unknown_status(order["status"], order_id)
        self.store.set(ORDERS, order_id, order)
        logger.info(f"✓ Created order {order['orderNumber']} ({order_id})")
        return {"id": order_id, **order}

    def update(self, order_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        existing = self.load(order_id)
        if existing is None:
            raise NotFound("Order not found", collection=ORDERS, key=order_id)

        changes = parse_payload(OrderUpdate, patch).model_dump(exclude_unset=True)
        for key in ("grandTotal", "grandTotalWithTax"):
            if key in changes and changes[key] is None:
                changes[key] = 0

        sequence_number = (
            coerce_sequence_number(changes.get("sequenceNumber"))
            or coerce_sequence_number(existing.get("sequenceNumber"))
        )
        updated = {
            **existing,
            **changes,
            "sequenceNumber": sequence_number,
            "orderNumber": order_number_for(sequence_number) if sequence_number else existing.get("orderNumber"),
            "status": changes.get("status") or existing.get("status") or DEFAULT_ORDER_STATUS,
            "updatedAt": self.clock(),
        }

        self._warn_unknown_status(updated["status"], order_id)
        self.store.set(ORDERS, order_id, updated)
        return {"id": order_id, **updated}

    def save(self, order_id: str, order: Dict[str, Any]) -> None:
        """Persist a full order body as-is (used by sync/invoice flows)."""
        body = {k: v for k, v in order.items() if k != "id"}
        self.store.set(ORDERS, order_id, body)

    def delete(self, order_id: str) -> None:
        self.store.delete(ORDERS, order_id)

    # ---------- helpers ----------

    @staticmethod
    def _warn_unknown_status(status: Any, order_id: str) -> None:
        # Out-of-vocabulary statuses are preserved as-is
        if known_order_status(status) is None:
            logger.warning(f"Order {order_id} has unrecognized status {status!r}; keeping as-is")
