# services/api/routers/service_requests.py
from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, status
from typing import Annotated, Any, Dict, Optional

from main import get_storage_adapter  # DI helper
from core.requests import ServiceRequestService

router = APIRouter(prefix="/service-requests", tags=["service-requests"])

Storage = Annotated[object, Depends(get_storage_adapter)]


@router.get("")
async def list_service_requests(storage: Storage, search: Optional[str] = Query(None)):
    return ServiceRequestService(storage).list(search=search)


@router.get("/{request_id}")
async def get_service_request(request_id: str, storage: Storage):
    return ServiceRequestService(storage).get(request_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_service_request(storage: Storage, payload: Dict[str, Any] = Body(...)):
    return ServiceRequestService(storage).create(payload)


@router.put("/{request_id}")
async def update_service_request(request_id: str, storage: Storage, payload: Dict[str, Any] = Body(...)):
    return ServiceRequestService(storage).update(request_id, payload)


@router.delete("/{request_id}")
async def delete_service_request(request_id: str, storage: Storage):
    ServiceRequestService(storage).delete(request_id)
    return {"success": True}
