"""
In-memory storage adapter.
Process-local; used by the test-suite and for throwaway local runs.
"""
from __future__ import annotations

import copy
from collections import defaultdict
from typing import Any, Dict, List, Optional


class MemoryStore:
    """
    Dict-backed document store.

    Documents are deep-copied on the way in and out so callers get the same
    isolation they would from a real store.
    """

    def __init__(self) -> None:
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)

    def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        doc = self._collections[collection].get(key)
        return copy.deepcopy(doc) if doc is not None else None

    def set(self, collection: str, key: str, document: Dict[str, Any]) -> None:
        self._collections[collection][key] = copy.deepcopy(document)

    def delete(self, collection: str, key: str) -> None:
        self._collections[collection].pop(key, None)

    def list_keys(self, collection: str) -> List[str]:
        return list(self._collections[collection].keys())
