# services/api/routers/orders.py
from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import HTMLResponse
from typing import Annotated, Any, Dict, Optional
import logging

from main import get_company_profile, get_storage_adapter  # DI helpers
from core.orders import OrderRepository
from core.rendering import CompanyProfile, render

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

# ---- DI alias (no default value allowed) ----
Storage = Annotated[object, Depends(get_storage_adapter)]
Company = Annotated[CompanyProfile, Depends(get_company_profile)]


@router.get("")
async def list_orders(storage: Storage, search: Optional[str] = Query(None)):
    """All orders, newest first. `search` matches order number or customer name."""
    return OrderRepository(storage).list(search=search)


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    storage: Storage,
    company: Company,
    print_kind: Optional[str] = Query(None, alias="print"),
):
    """
    Fetch one order, or with ?print=<kind> its printable HTML
    (quote | ticket | packing-list | invoice | purchase-order).
    """
    order = OrderRepository(storage).get(order_id)
    if print_kind:
        return HTMLResponse(render(order, print_kind, company))
    return order


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(storage: Storage, payload: Dict[str, Any] = Body(...)):
    return OrderRepository(storage).create(payload)


@router.put("/{order_id}")
async def update_order(order_id: str, storage: Storage, payload: Dict[str, Any] = Body(...)):
    return OrderRepository(storage).update(order_id, payload)


@router.delete("/{order_id}")
async def delete_order(order_id: str, storage: Storage):
    OrderRepository(storage).delete(order_id)
    return {"success": True}
