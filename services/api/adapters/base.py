"""
Document store interface for the back office.
Defines the contract that all storage backends must implement.
"""

from typing import Protocol, List, Dict, Any, Optional


# Collections used by the service. Each one is an independent keyspace.
ORDERS = "orders"
PURCHASE_ORDERS = "purchase-orders"
INVOICES = "invoices"
QUOTES = "quotes"
CUSTOMERS = "customers"
VENDORS = "vendors"
TECHNICIANS = "technicians"
SERVICE_TECHS = "service-techs"
SERVICE_REQUESTS = "service-requests"
RESIDENTIAL_REQUESTS = "residential-requests"

ORDER_SEQUENCES = "document-sequences"
INVOICE_SEQUENCES = "invoice-sequences"
RESIDENTIAL_REQUEST_SEQUENCES = "residential-request-seq"


class DocumentStore(Protocol):
    """
    Protocol defining the interface for all storage adapters.

    Documents are schemaless JSON objects keyed by an opaque string within a
    named collection. This allows swapping between the in-memory, JSON-file
    and SQLite backends without changing routers or business logic.

    NOTE:
    - Implementations must hand out copies: mutating a dict returned by
      `get` must not change what is stored until `set` is called.
    - Backend failures are raised as core.errors.StorageError.
    """

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a document by key.

        Returns:
            The stored document, or None if the key is absent.
        """
        ...

    def set(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        """
        Create or overwrite a document (last write wins).
        """
        ...

    def delete(self, collection: str, key: str) -> None:
        """
        Remove a document. Deleting an absent key is a no-op.
        """
        ...

    def list_keys(self, collection: str) -> List[str]:
        """
        Return every key currently stored in the collection.
        Order is unspecified; callers sort.
        """
        ...
