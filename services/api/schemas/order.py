"""
Pydantic schemas for Order and Purchase Order payloads.

These double as field whitelists: keys not declared here never reach the
store, whatever the client sends.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderCreate(BaseModel):
    """Schema for creating an order."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    sequenceNumber: Optional[Any] = Field(
        None, description="Trusted as-is when numeric (import/migration path)"
    )
    status: Optional[str] = None
    vendorName: Optional[str] = None
    vendorPoNumber: Optional[str] = None
    requestedDate: Optional[str] = None
    vendorDeliveryDate: Optional[str] = None
    vendorReceivedAt: Optional[str] = None
    customer: Optional[Dict[str, Any]] = None
    items: Optional[List[Dict[str, Any]]] = None
    hardware: Optional[Any] = None
    hardwareItems: Optional[List[Any]] = None
    specialPricing: Optional[bool] = None
    grandTotal: Optional[float] = None
    grandTotalWithTax: Optional[float] = None
    invoiceDate: Optional[str] = None
    terms: Optional[str] = None
    notes: Optional[str] = None
    shopNotes: Optional[str] = None

    @field_validator("grandTotal", "grandTotalWithTax", mode="before")
    @classmethod
    def blank_total_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class OrderUpdate(OrderCreate):
    """Schema for updating an order. Only provided keys are applied."""
    invoiceNumber: Optional[str] = None
    pickedUpAt: Optional[str] = None


class PurchaseOrderCreate(BaseModel):
    """Schema for creating a purchase order (after upper-casing)."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    orderId: Optional[str] = None
    orderNumber: Optional[str] = None
    dateOrdered: Optional[str] = None
    requestedDate: Optional[str] = None
    poNumber: Optional[str] = None
    vendor: Optional[str] = None
    poType: Optional[str] = None
    deliveryDate: Optional[str] = None
    receivedAt: Optional[str] = None
    status: Optional[str] = None
    syncToOrder: Optional[bool] = None
    items: Optional[List[Dict[str, Any]]] = None


class PurchaseOrderUpdate(PurchaseOrderCreate):
    """Schema for updating a purchase order. Only provided keys are applied."""


class InvoiceCreate(BaseModel):
    """Schema for converting an order into an invoice."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    orderId: Optional[str] = Field(None, description="Order to invoice")
