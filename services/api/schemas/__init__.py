"""
Pydantic schemas for API request validation.
"""
from .order import (
    OrderCreate,
    OrderUpdate,
    PurchaseOrderCreate,
    PurchaseOrderUpdate,
    InvoiceCreate,
)
from .requests import (
    RequestCustomer,
    ResidentialRequestCreate,
    ResidentialRequestUpdate,
    ServiceRequestCreate,
    ServiceRequestUpdate,
)
from .directory import (
    CustomerIn,
    VendorIn,
    TechnicianIn,
    ServiceTechIn,
    QuoteIn,
    CustomersImport,
    VendorsImport,
)
