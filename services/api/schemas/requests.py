"""
Pydantic schemas for service and residential requests.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class RequestCustomer(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: Optional[Any] = None
    name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    creditTerms: Optional[str] = None


class ResidentialRequestCreate(BaseModel):
    """Schema for creating a residential request."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    customer: Optional[Dict[str, Any]] = None
    description: Optional[str] = None
    assignedTech: Optional[str] = None
    assignedTechId: Optional[str] = None
    status: Optional[str] = None


class ResidentialRequestUpdate(ResidentialRequestCreate):
    """Schema for updating a residential request."""


class ServiceRequestCreate(BaseModel):
    """Schema for creating a service request."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    customer: Optional[RequestCustomer] = None
    description: Optional[str] = None
    assignedTechId: Optional[str] = None
    assignedTechName: Optional[str] = None
    status: Optional[str] = None


class ServiceRequestUpdate(BaseModel):
    """Schema for updating a service request; customer is merged, not replaced."""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    customer: Optional[Dict[str, Any]] = None
    description: Optional[str] = None
    assignedTechId: Optional[str] = None
    assignedTechName: Optional[str] = None
    status: Optional[str] = None
