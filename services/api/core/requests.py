# services/api/core/requests.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from adapters.base import DocumentStore, RESIDENTIAL_REQUESTS, SERVICE_REQUESTS
from core.errors import NotFound, ValidationError
from core.identifiers import epoch_ms, new_document_id, utc_iso
from core.notifications import RequestNotifier
from core.orders import sort_newest_first
from core.sequences import SequenceGenerator
from core.technicians import TechContact, TechnicianDirectory
from core.validation import parse_payload, require_text
from schemas.requests import (
    ResidentialRequestCreate,
    ResidentialRequestUpdate,
    ServiceRequestCreate,
    ServiceRequestUpdate,
)

logger = logging.getLogger(__name__)

RESIDENTIAL_SEQUENCE = "residential-requests"
DEFAULT_RESIDENTIAL_STATUS = "open"
DEFAULT_SERVICE_STATUS = "Requested"


def residential_request_number(value: int) -> str:
    return f"RR-{value:04d}"


def service_request_number(ms: int, year: int) -> str:
    return f"RQR-{year}-{str(ms)[-6:]}"


def _list_collection(store: DocumentStore, collection: str) -> List[Dict[str, Any]]:
    rows = []
    for key in store.list_keys(collection):
        data = store.get(collection, key)
        if data:
            rows.append({"id": key, **data})
    return sort_newest_first(rows)


class ResidentialRequestService:
    """
    Residential requests: numbered RR-0001, RR-0002, ... and assigned to a
    service tech who is emailed on assignment.

    The notification outcome is stored as `emailNotification`; a failed
    email never fails the write.
    """

    def __init__(
        self,
        store: DocumentStore,
        notifier: RequestNotifier,
        directory: Optional[TechnicianDirectory] = None,
        sequences: Optional[SequenceGenerator] = None,
        clock: Callable[[], str] = utc_iso,
    ):
        self.store = store
        self.notifier = notifier
        self.directory = directory or TechnicianDirectory(store)
        self.sequences = sequences or SequenceGenerator(store)
        self.clock = clock

    def get(self, request_id: str) -> Dict[str, Any]:
        row = self.store.get(RESIDENTIAL_REQUESTS, request_id)
        if row is None:
            raise NotFound("Not found", collection=RESIDENTIAL_REQUESTS, key=request_id)
        return {"id": request_id, **row}

    def list(self) -> List[Dict[str, Any]]:
        return _list_collection(self.store, RESIDENTIAL_REQUESTS)

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = parse_payload(ResidentialRequestCreate, payload)
        customer = body.customer or {}
        if not customer.get("name"):
            raise ValidationError("Customer name is required")

        tech = self.directory.resolve(body.model_dump())
        now = self.clock()
        row: Dict[str, Any] = {
            "requestNumber": residential_request_number(self.sequences.next(RESIDENTIAL_SEQUENCE)),
            "customer": customer,
            "description": body.description or "",
            "assignedTech": tech.name or body.assignedTech or "",
            "assignedTechId": tech.id or body.assignedTechId or "",
            "assignedTechEmail": tech.email,
            "status": body.status or DEFAULT_RESIDENTIAL_STATUS,
            "createdAt": now,
            "updatedAt": now,
        }
        row["emailNotification"] = await self.notifier.notify(row)

        request_id = new_document_id("req")
        self.store.set(RESIDENTIAL_REQUESTS, request_id, row)
        logger.info(f"✓ Created residential request {row['requestNumber']} ({request_id})")
        return {"id": request_id, **row}

    async def update(self, request_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        existing = self.store.get(RESIDENTIAL_REQUESTS, request_id)
        if existing is None:
            raise NotFound("Not found", collection=RESIDENTIAL_REQUESTS, key=request_id)

        changes = parse_payload(ResidentialRequestUpdate, patch).model_dump(exclude_unset=True)
        tech_changed = bool(changes.get("assignedTechId") or changes.get("assignedTech"))

        if tech_changed:
            # a reassignment replaces the whole contact; an unresolved name
            # must not inherit the previous tech's id or email
            resolved = self.directory.resolve(changes)
            tech = TechContact(
                id=resolved.id or changes.get("assignedTechId") or "",
                name=resolved.name or changes.get("assignedTech") or existing.get("assignedTech") or "",
                email=resolved.email,
            )
        else:
            tech = TechContact(
                id=existing.get("assignedTechId") or "",
                name=existing.get("assignedTech") or "",
                email=existing.get("assignedTechEmail") or "",
            )

        updated = {
            **existing,
            **changes,
            "assignedTech": tech.name,
            "assignedTechId": tech.id,
            "assignedTechEmail": tech.email,
            "requestNumber": existing.get("requestNumber"),
            "updatedAt": self.clock(),
        }
        if tech_changed:
            updated["emailNotification"] = await self.notifier.notify(updated)

        self.store.set(RESIDENTIAL_REQUESTS, request_id, updated)
        return {"id": request_id, **updated}

    def delete(self, request_id: str) -> None:
        self.store.delete(RESIDENTIAL_REQUESTS, request_id)


class ServiceRequestService:
    """Commercial service requests (RQR-<year>-<nnnnnn>), no email."""

    SEARCH_FIELDS = ("requestNumber", "assignedTechName", "description")
    CUSTOMER_SEARCH_FIELDS = ("name", "phone", "address")

    def __init__(
        self,
        store: DocumentStore,
        clock: Callable[[], str] = utc_iso,
        now_ms: Callable[[], int] = epoch_ms,
    ):
        self.store = store
        self.clock = clock
        self.now_ms = now_ms

    def get(self, request_id: str) -> Dict[str, Any]:
        row = self.store.get(SERVICE_REQUESTS, request_id)
        if row is None:
            raise NotFound("Service request not found", collection=SERVICE_REQUESTS, key=request_id)
        return {"id": request_id, **row}

    def list(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        rows = _list_collection(self.store, SERVICE_REQUESTS)
        needle = (search or "").strip().lower()
        if not needle:
            return rows
        return [r for r in rows if needle in self._haystack(r)]

    def _haystack(self, row: Dict[str, Any]) -> str:
        customer = row.get("customer") or {}
        parts = [row.get(f) for f in self.SEARCH_FIELDS]
        parts += [customer.get(f) for f in self.CUSTOMER_SEARCH_FIELDS]
        return " ".join("" if p is None else str(p) for p in parts).lower()

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = parse_payload(ServiceRequestCreate, payload)
        customer = body.customer
        if customer is None or not customer.name:
            raise ValidationError("Customer name is required")
        description = require_text(body.description, "Description is required")
        if not body.assignedTechId or not body.assignedTechName:
            raise ValidationError("Assigned technician is required")

        ms = self.now_ms()
        now = self.clock()
        row = {
            "requestNumber": service_request_number(ms, datetime.now(timezone.utc).year),
            "customer": {
                "id": customer.id or None,
                "name": (customer.name or "").strip(),
                "address": (customer.address or "").strip(),
                "email": (customer.email or "").strip(),
                "phone": (customer.phone or "").strip(),
                "creditTerms": (customer.creditTerms or "").strip(),
            },
            "description": description,
            "assignedTechId": body.assignedTechId,
            "assignedTechName": body.assignedTechName,
            "status": body.status or DEFAULT_SERVICE_STATUS,
            "createdAt": now,
            "updatedAt": now,
        }

        request_id = new_document_id("sr")
        self.store.set(SERVICE_REQUESTS, request_id, row)
        logger.info(f"✓ Created service request {row['requestNumber']} ({request_id})")
        return {"id": request_id, **row}

    def update(self, request_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        existing = self.store.get(SERVICE_REQUESTS, request_id)
        if existing is None:
            raise NotFound("Service request not found", collection=SERVICE_REQUESTS, key=request_id)

        changes = parse_payload(ServiceRequestUpdate, patch).model_dump(exclude_unset=True)
        updated = {
            **existing,
            **changes,
            "customer": {**(existing.get("customer") or {}), **(changes.get("customer") or {})},
            "updatedAt": self.clock(),
        }
        self.store.set(SERVICE_REQUESTS, request_id, updated)
        return {"id": request_id, **updated}

    def delete(self, request_id: str) -> None:
        self.store.delete(SERVICE_REQUESTS, request_id)
