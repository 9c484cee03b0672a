# services/api/core/technicians.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from adapters.base import DocumentStore, SERVICE_TECHS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TechContact:
    id: str = ""
    name: str = ""
    email: str = ""


class TechnicianDirectory:
    """
    Resolves the technician named on a request payload to a contact.

    Lookup order: `assignedTechId` as a store key, then an exact
    (trimmed, case-insensitive) match of `assignedTech` against every
    tech's name. An unmatched name is kept with empty id/email.
    """

    def __init__(self, store: DocumentStore, collection: str = SERVICE_TECHS):
        self.store = store
        self.collection = collection

    def resolve(self, payload: Optional[Dict[str, Any]]) -> TechContact:
        payload = payload or {}
        tech_id = payload.get("assignedTechId")
        tech_name = payload.get("assignedTech")

        if tech_id:
            tech = self.store.get(self.collection, str(tech_id))
            if tech:
                return TechContact(
                    id=str(tech_id),
                    name=tech.get("name") or tech_name or "",
                    email=tech.get("email") or "",
                )

        if tech_name:
            needle = str(tech_name).strip().lower()
            for key in self.store.list_keys(self.collection):
                tech = self.store.get(self.collection, key)
                if tech and str(tech.get("name") or "").strip().lower() == needle:
                    return TechContact(id=key, name=tech.get("name") or tech_name, email=tech.get("email") or "")
            logger.warning(f"Technician {tech_name!r} not found in {self.collection}")
            return TechContact(name=str(tech_name))

        return TechContact()
