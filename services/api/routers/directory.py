# services/api/routers/directory.py
"""
Routers for the simple record collections (customers, vendors, technicians,
service techs, quotes) plus the customer/vendor bulk imports.
"""
from __future__ import annotations

from fastapi import APIRouter, Body, Depends, status
from typing import Annotated, Any, Dict

from main import get_storage_adapter  # DI helper
from core.records import CUSTOMER, QUOTE, SERVICE_TECH, TECHNICIAN, VENDOR, RecordKind, RecordService
from core.validation import parse_payload
from schemas.directory import CustomersImport, VendorsImport

Storage = Annotated[object, Depends(get_storage_adapter)]


def record_router(kind: RecordKind, prefix: str, allow_update: bool = True) -> APIRouter:
    """list / get / create / (update) / delete for one RecordKind."""
    r = APIRouter(prefix=prefix, tags=[kind.collection])

    @r.get("")
    async def list_records(storage: Storage):
        return RecordService(storage, kind).list()

    @r.get("/{record_id}")
    async def get_record(record_id: str, storage: Storage):
        return RecordService(storage, kind).get(record_id)

    @r.post("", status_code=status.HTTP_201_CREATED)
    async def create_record(storage: Storage, payload: Dict[str, Any] = Body(...)):
        return RecordService(storage, kind).create(payload)

    if allow_update:
        @r.put("/{record_id}")
        async def update_record(record_id: str, storage: Storage, payload: Dict[str, Any] = Body(...)):
            return RecordService(storage, kind).update(record_id, payload)

    @r.delete("/{record_id}")
    async def delete_record(record_id: str, storage: Storage):
        RecordService(storage, kind).delete(record_id)
        return {"success": True}

    return r


customers = record_router(CUSTOMER, "/customers")
vendors = record_router(VENDOR, "/vendors")
technicians = record_router(TECHNICIAN, "/technicians")
service_techs = record_router(SERVICE_TECH, "/service-techs", allow_update=False)
quotes = record_router(QUOTE, "/quotes")

imports = APIRouter(tags=["imports"])


@imports.post("/customers-import")
async def import_customers(storage: Storage, payload: Dict[str, Any] = Body(...)):
    """Bulk-create customers from {"customers": [...]}; returns created/skipped/errors."""
    body = parse_payload(CustomersImport, payload)
    return RecordService(storage, CUSTOMER).import_many(body.customers, "customers")


@imports.post("/vendors-import")
async def import_vendors(storage: Storage, payload: Dict[str, Any] = Body(...)):
    """Same as the customer import; vendor fields are upper-cased first."""
    body = parse_payload(VendorsImport, payload)
    return RecordService(storage, VENDOR).import_many(body.vendors, "vendors")


routers = [customers, vendors, technicians, service_techs, quotes, imports]
