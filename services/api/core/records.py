# services/api/core/records.py
"""
Whitelisted CRUD for the simple directory collections: customers, vendors,
technicians, service techs, and standalone quotes.

Each collection is described by a RecordKind; RecordService does the
store work for all of them the same way.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel

from adapters.base import CUSTOMERS, DocumentStore, QUOTES, SERVICE_TECHS, TECHNICIANS, VENDORS
from core.errors import BackOfficeError, NotFound, ValidationError
from core.identifiers import new_document_id, utc_iso
from core.orders import sort_newest_first
from core.validation import normalize_strings_upper, parse_payload
from schemas.directory import CustomerIn, QuoteIn, ServiceTechIn, TechnicianIn, VendorIn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordKind:
    collection: str
    schema: Type[BaseModel]
    id_prefix: str
    # field -> default applied on create
    defaults: Dict[str, Any]
    not_found_message: str
    # None means no required name
    name_required_message: Optional[str] = None
    id_sep: str = "_"
    trim: bool = False
    sort: str = "none"  # none | name | newest
    # updatedAt is stamped on create too
    track_updated_at: bool = True
    # store the id inside the document body as well
    embed_id: bool = False
    import_upper: bool = False


CUSTOMER = RecordKind(
    collection=CUSTOMERS,
    schema=CustomerIn,
    id_prefix="cust",
    defaults={"name": "", "address": "", "email": "", "phone": "", "creditTerms": ""},
    not_found_message="Customer not found",
    name_required_message="Customer name is required",
)

VENDOR = RecordKind(
    collection=VENDORS,
    schema=VendorIn,
    id_prefix="vendor",
    defaults={"name": "", "address": "", "email": "", "phone": ""},
    not_found_message="Vendor not found",
    name_required_message="Vendor name is required",
    trim=True,
    import_upper=True,
)

TECHNICIAN = RecordKind(
    collection=TECHNICIANS,
    schema=TechnicianIn,
    id_prefix="tech",
    defaults={"name": "", "phone": "", "email": "", "active": True},
    not_found_message="Technician not found",
    name_required_message="Technician name is required",
    trim=True,
    sort="name",
)

SERVICE_TECH = RecordKind(
    collection=SERVICE_TECHS,
    schema=ServiceTechIn,
    id_prefix="tech",
    defaults={"name": "", "phone": "", "email": ""},
    not_found_message="Not found",
    name_required_message="Name is required",
    track_updated_at=False,
)

QUOTE = RecordKind(
    collection=QUOTES,
    schema=QuoteIn,
    id_prefix="quote",
    id_sep="-",
    defaults={
        "customerName": "",
        "customerPhone": "",
        "items": [],
        "hardwareItem": "",
        "hardwarePrice": 0,
        "grandTotal": 0,
        "grandTotalWithTax": 0,
        "specialPricing": False,
        "notes": "",
    },
    not_found_message="Quote not found",
    sort="newest",
    track_updated_at=False,
    embed_id=True,
)


class RecordService:
    def __init__(self, store: DocumentStore, kind: RecordKind, clock: Callable[[], str] = utc_iso):
        self.store = store
        self.kind = kind
        self.clock = clock

    # ---------- helpers ----------

    def _clean(self, value: Any) -> Any:
        if self.kind.trim and isinstance(value, str):
            return value.strip()
        return value

    def _with_id(self, key: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return {"id": key, **data}

    def _build(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """New record body: every whitelisted field, falsy values replaced by defaults."""
        record: Dict[str, Any] = {}
        for name, default in self.kind.defaults.items():
            value = self._clean(values.get(name))
            if name == "active":
                record[name] = value is not False
            else:
                record[name] = value or default
        now = self.clock()
        record["createdAt"] = now
        if self.kind.track_updated_at:
            record["updatedAt"] = now
        return record

    def _check_name(self, record: Dict[str, Any]) -> None:
        if self.kind.name_required_message and not str(record.get("name") or "").strip():
            raise ValidationError(self.kind.name_required_message)

    # ---------- read ----------

    def get(self, key: str) -> Dict[str, Any]:
        data = self.store.get(self.kind.collection, key)
        if data is None:
            raise NotFound(self.kind.not_found_message, collection=self.kind.collection, key=key)
        return self._with_id(key, data)

    def list(self) -> List[Dict[str, Any]]:
        rows = []
        for key in self.store.list_keys(self.kind.collection):
            data = self.store.get(self.kind.collection, key)
            if data:
                rows.append(self._with_id(key, data))
        if self.kind.sort == "name":
            rows.sort(key=lambda r: str(r.get("name") or "").lower())
        elif self.kind.sort == "newest":
            rows = sort_newest_first(rows)
        return rows

    # ---------- write ----------

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        body = parse_payload(self.kind.schema, payload).model_dump()
        record = self._build(body)
        self._check_name(record)

        key = new_document_id(self.kind.id_prefix, sep=self.kind.id_sep)
        if self.kind.embed_id:
            record = {"id": key, **record}
        self.store.set(self.kind.collection, key, record)
        logger.info(f"✓ Created {self.kind.collection} record {key}")
        return self._with_id(key, record)

    def update(self, key: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        existing = self.store.get(self.kind.collection, key)
        if existing is None:
            raise NotFound(self.kind.not_found_message, collection=self.kind.collection, key=key)

        changes = parse_payload(self.kind.schema, patch).model_dump(exclude_none=True)
        updated = {**existing}
        for name in self.kind.defaults:
            if name in changes:
                updated[name] = self._clean(changes[name])
        updated["createdAt"] = existing.get("createdAt")
        updated["updatedAt"] = self.clock()
        if self.kind.embed_id:
            updated["id"] = key

        self.store.set(self.kind.collection, key, updated)
        return self._with_id(key, updated)

    def delete(self, key: str) -> None:
        self.store.delete(self.kind.collection, key)

    # ---------- bulk ----------

    def import_many(self, entries: Any, label: str) -> Dict[str, Any]:
        """
        Create one record per entry. Blank names are skipped; a storage
        failure on one entry is recorded and the rest continue.

        Raises:
            ValidationError: entries is not a non-empty list
        """
        if not isinstance(entries, list) or not entries:
            raise ValidationError(f"An array of {label} is required")
        if self.kind.import_upper:
            entries = normalize_strings_upper(entries)

        results: Dict[str, Any] = {"created": 0, "skipped": 0, "errors": []}
        for entry in entries:
            entry = entry if isinstance(entry, dict) else {}
            name = str(entry.get("name") or "").strip()
            if not name:
                results["skipped"] += 1
                continue

            values = {k: (str(entry.get(k) or "").strip()) for k in self.kind.defaults}
            values["name"] = name
            record = self._build(values)
            key = new_document_id(self.kind.id_prefix, sep=self.kind.id_sep)
            try:
                self.store.set(self.kind.collection, key, record)
                results["created"] += 1
            except BackOfficeError as e:
                logger.warning(f"Import of {name!r} into {self.kind.collection} failed: {e.message}")
                results["errors"].append({"name": name, "error": e.message})

        logger.info(
            f"✓ Imported {label}: {results['created']} created, {results['skipped']} skipped, "
            f"{len(results['errors'])} errors"
        )
        return results
