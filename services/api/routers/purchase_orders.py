# services/api/routers/purchase_orders.py
from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import HTMLResponse
from typing import Annotated, Any, Dict, Optional

from main import get_company_profile, get_storage_adapter  # DI helpers
from core.purchase_orders import PurchaseOrderService
from core.rendering import CompanyProfile, render_purchase_order_record

router = APIRouter(prefix="/purchase-orders", tags=["purchase-orders"])

Storage = Annotated[object, Depends(get_storage_adapter)]
Company = Annotated[CompanyProfile, Depends(get_company_profile)]


@router.get("")
async def list_purchase_orders(storage: Storage):
    return PurchaseOrderService(storage).list()


@router.get("/{po_id}")
async def get_purchase_order(
    po_id: str,
    storage: Storage,
    company: Company,
    print_kind: Optional[str] = Query(None, alias="print"),
):
    """Any non-empty ?print= returns the PO sheet as HTML."""
    po = PurchaseOrderService(storage).get(po_id)
    if print_kind:
        return HTMLResponse(render_purchase_order_record(po, company))
    return po


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_purchase_order(storage: Storage, payload: Dict[str, Any] = Body(...)):
    """
    Create a PO and push its status/vendor fields to the linked order.
    The response's `orderSync` reports whether the order was updated.
    """
    return PurchaseOrderService(storage).create(payload)


@router.put("/{po_id}")
async def update_purchase_order(po_id: str, storage: Storage, payload: Dict[str, Any] = Body(...)):
    return PurchaseOrderService(storage).update(po_id, payload)


@router.delete("/{po_id}")
async def delete_purchase_order(po_id: str, storage: Storage):
    PurchaseOrderService(storage).delete(po_id)
    return {"success": True}
