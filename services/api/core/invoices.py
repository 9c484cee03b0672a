# services/api/core/invoices.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from adapters.base import DocumentStore, INVOICES
from core.errors import NotFound
from core.identifiers import new_document_id, utc_iso
from core.orders import OrderRepository, sort_newest_first
from core.sequences import SequenceGenerator
from core.validation import nested_text, normalize_strings_upper, parse_payload, require_text
from models.status import OrderStatus, is_invoiced
from schemas.order import InvoiceCreate

logger = logging.getLogger(__name__)

INVOICE_SEQUENCE = "invoices"
DEFAULT_TERMS = "DUE UPON RECEIPT"


def invoice_number_for(sequence_number: int) -> str:
    return f"I{sequence_number}"


class InvoiceGenerator:
    """
    Converts an Order into an Invoice exactly once.

    The Order's INVOICED status plus its invoiceNumber is the only
    idempotence marker: a second conversion request returns the existing
    number without touching the counter or writing anything.
    """

    def __init__(
        self,
        store: DocumentStore,
        orders: Optional[OrderRepository] = None,
        sequences: Optional[SequenceGenerator] = None,
        clock: Callable[[], str] = utc_iso,
    ):
        self.store = store
        self.sequences = sequences or SequenceGenerator(store)
        self.orders = orders or OrderRepository(store, sequences=self.sequences, clock=clock)
        self.clock = clock

    def get(self, invoice_id: str) -> Dict[str, Any]:
        invoice = self.store.get(INVOICES, invoice_id)
        if invoice is None:
            raise NotFound("Invoice not found", collection=INVOICES, key=invoice_id)
        return {"id": invoice_id, **invoice}

    def list(self) -> List[Dict[str, Any]]:
        invoices = []
        for key in self.store.list_keys(INVOICES):
            data = self.store.get(INVOICES, key)
            if data:
                invoices.append({"id": key, **data})
        return sort_newest_first(invoices)

    def invoice(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Invoice the order named by payload["orderId"].

        Returns either the new invoice (with `id`) or an
        `{"alreadyInvoiced": True, ...}` marker.

        Raises:
            ValidationError: orderId missing
            NotFound: order does not exist
        """
        body = parse_payload(InvoiceCreate, normalize_strings_upper(payload))
        order_id = require_text(body.orderId, "orderId is required")

        order = self.orders.load(order_id)
        if order is None:
            raise NotFound("Order not found", collection="orders", key=order_id)

        if is_invoiced(order):
            logger.info(f"Order {order_id} already invoiced as {order['invoiceNumber']}")
            return {
                "alreadyInvoiced": True,
                "orderId": order_id,
                "invoiceNumber": order["invoiceNumber"],
                "orderNumber": order.get("orderNumber"),
            }

        seq = self.sequences.next(INVOICE_SEQUENCE)
        invoice_number = invoice_number_for(seq)
        now = self.clock()
        terms = nested_text(order, "customer", "creditTerms") or order.get("terms") or DEFAULT_TERMS

        invoice = {
            "invoiceNumber": invoice_number,
            "sequenceNumber": seq,
            "orderId": order_id,
            "orderNumber": order.get("orderNumber") or "",
            "status": OrderStatus.INVOICED.value,
            "invoiceDate": now,
            "terms": terms,
            # snapshot: later Order edits do not flow into the invoice
            "customer": order.get("customer") or {},
            "vendorName": order.get("vendorName") or "",
            "vendorPoNumber": order.get("vendorPoNumber") or "",
            "items": order.get("items") or [],
            "hardwareItems": order.get("hardwareItems") or [],
            "grandTotal": order.get("grandTotal") or 0,
            "grandTotalWithTax": order.get("grandTotalWithTax") or 0,
            "createdAt": now,
        }

        invoice_id = new_document_id("invoice")
        self.store.set(INVOICES, invoice_id, invoice)

        self.orders.save(order_id, {
            **order,
            "status": OrderStatus.INVOICED.value,
            "invoiceNumber": invoice_number,
            "invoiceDate": now,
            "terms": terms,
            "pickedUpAt": now,
            "updatedAt": now,
        })

        logger.info(f"✓ Invoiced order {order.get('orderNumber') or order_id} as {invoice_number}")
        return {"id": invoice_id, **invoice}
