"""
Domain errors for the back office.

Routers never build error responses themselves: they let these propagate and
main.py maps them to HTTP responses via exception handlers.
"""
from __future__ import annotations

from typing import Optional


class BackOfficeError(Exception):
    """Base class. `status_code` is what the HTTP layer should answer with."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BackOfficeError):
    """Missing/invalid input. Raised before anything is written."""

    status_code = 400


class NotFound(BackOfficeError):
    """Unknown document id referenced by get/update."""

    status_code = 404

    def __init__(self, message: str, *, collection: Optional[str] = None, key: Optional[str] = None):
        super().__init__(message)
        self.collection = collection
        self.key = key


class StorageError(BackOfficeError):
    """Underlying document store failed. Not retried."""

    status_code = 500

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
