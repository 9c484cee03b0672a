# services/api/core/sequences.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from adapters.base import (
    DocumentStore,
    INVOICE_SEQUENCES,
    ORDER_SEQUENCES,
    RESIDENTIAL_REQUEST_SEQUENCES,
)

logger = logging.getLogger(__name__)

COUNTER_KEY = "main"

# sequence name -> (backing collection, seed)
KNOWN_SEQUENCES: Dict[str, Tuple[str, int]] = {
    "orders": (ORDER_SEQUENCES, 999),
    "invoices": (INVOICE_SEQUENCES, 999),
    "residential-requests": (RESIDENTIAL_REQUEST_SEQUENCES, 0),
}


def _counter_value(doc: Optional[Dict[str, Any]], seed: int) -> int:
    if not doc:
        return seed
    value = doc.get("value")
    # bool is an int subclass; a stored true/false is not a counter
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return seed
    if value != value or value in (float("inf"), float("-inf")):
        return seed
    return int(value)


class SequenceGenerator:
    """
    Durable named counters.

    Each sequence is a single `{"value": n}` document stored under key
    "main" in its own collection. `next` is a plain read-modify-write with
    no locking: two callers racing on the same name can be issued the same
    number (last write wins in the store).
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    @staticmethod
    def resolve(name: str, seed: Optional[int] = None) -> Tuple[str, int]:
        collection, default_seed = KNOWN_SEQUENCES.get(name, (name, 0))
        return collection, default_seed if seed is None else int(seed)

    def peek(self, name: str, seed: Optional[int] = None) -> int:
        """Current value of the counter (seed if it was never used)."""
        collection, seed_value = self.resolve(name, seed)
        return _counter_value(self.store.get(collection, COUNTER_KEY), seed_value)

    def next(self, name: str, seed: Optional[int] = None) -> int:
        """
        Issue the next number for `name`.

        First call on a fresh counter returns seed + 1.
        """
        collection, seed_value = self.resolve(name, seed)
        current = _counter_value(self.store.get(collection, COUNTER_KEY), seed_value)
        value = current + 1
        self.store.set(collection, COUNTER_KEY, {"value": value})
        logger.debug(f"Sequence {name} -> {value}")
        return value
