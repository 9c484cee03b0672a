# services/api/routers/residential_requests.py
from __future__ import annotations

from fastapi import APIRouter, Body, Depends, status
from typing import Annotated, Any, Dict

from main import get_notifier, get_storage_adapter  # DI helpers
from core.notifications import RequestNotifier
from core.requests import ResidentialRequestService

router = APIRouter(prefix="/residential-requests", tags=["residential-requests"])

Storage = Annotated[object, Depends(get_storage_adapter)]
Notifier = Annotated[RequestNotifier, Depends(get_notifier)]


@router.get("")
async def list_residential_requests(storage: Storage, notifier: Notifier):
    return ResidentialRequestService(storage, notifier).list()


@router.get("/{request_id}")
async def get_residential_request(request_id: str, storage: Storage, notifier: Notifier):
    return ResidentialRequestService(storage, notifier).get(request_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_residential_request(storage: Storage, notifier: Notifier, payload: Dict[str, Any] = Body(...)):
    """
    Create a request and email the assigned tech. The outcome is stored
    on the record as `emailNotification`; email problems never fail the call.
    """
    return await ResidentialRequestService(storage, notifier).create(payload)


@router.put("/{request_id}")
async def update_residential_request(
    request_id: str, storage: Storage, notifier: Notifier, payload: Dict[str, Any] = Body(...)
):
    return await ResidentialRequestService(storage, notifier).update(request_id, payload)


@router.delete("/{request_id}")
async def delete_residential_request(request_id: str, storage: Storage, notifier: Notifier):
    ResidentialRequestService(storage, notifier).delete(request_id)
    return {"success": True}
