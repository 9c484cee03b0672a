# services/api/routers/invoices.py
from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Response, status
from typing import Annotated, Any, Dict

from main import get_storage_adapter  # DI helper
from core.invoices import InvoiceGenerator

router = APIRouter(prefix="/invoices", tags=["invoices"])

Storage = Annotated[object, Depends(get_storage_adapter)]


@router.get("")
async def list_invoices(storage: Storage):
    return InvoiceGenerator(storage).list()


@router.get("/{invoice_id}")
async def get_invoice(invoice_id: str, storage: Storage):
    return InvoiceGenerator(storage).get(invoice_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_invoice(response: Response, storage: Storage, payload: Dict[str, Any] = Body(...)):
    """
    Convert an order into an invoice. Converting an already-invoiced order
    answers 200 with `alreadyInvoiced: true` and writes nothing.
    """
    result = InvoiceGenerator(storage).invoice(payload)
    if result.get("alreadyInvoiced"):
        response.status_code = status.HTTP_200_OK
    return result
