"""
Pydantic schemas for the directory collections (customers, vendors,
technicians, service techs) and standalone quotes.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CustomerIn(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    creditTerms: Optional[str] = None


class VendorIn(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class TechnicianIn(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    active: Optional[bool] = None


class ServiceTechIn(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class QuoteIn(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    customerName: Optional[str] = None
    customerPhone: Optional[str] = None
    items: Optional[List[Dict[str, Any]]] = None
    hardwareItem: Optional[Any] = None
    hardwarePrice: Optional[float] = None
    grandTotal: Optional[float] = None
    grandTotalWithTax: Optional[float] = None
    specialPricing: Optional[bool] = None
    notes: Optional[str] = None

    @field_validator("hardwarePrice", "grandTotal", "grandTotalWithTax", mode="before")
    @classmethod
    def blank_amount_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CustomersImport(BaseModel):
    """Bulk import body: {"customers": [...]}."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    customers: List[Dict[str, Any]] = Field(default_factory=list)


class VendorsImport(BaseModel):
    """Bulk import body: {"vendors": [...]}."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    vendors: List[Dict[str, Any]] = Field(default_factory=list)
