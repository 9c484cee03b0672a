from __future__ import annotations

import secrets
import string
import time
from datetime import datetime, timezone
from typing import Optional

_ALPHABET = string.ascii_lowercase + string.digits


def utc_iso(dt: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a trailing Z."""
    dt = dt or datetime.now(timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_ms() -> int:
    return int(time.time() * 1000)


def new_document_id(prefix: str, sep: str = "_") -> str:
    """
    Opaque document id, e.g. order_1718000000000_k3j9xq.
    Time-prefixed so keys sort roughly by creation.
    """
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"{prefix}{sep}{epoch_ms()}{sep}{suffix}"


def parse_iso(value: object) -> Optional[datetime]:
    """
    Parse a stored ISO-8601 timestamp or date. Accepts a trailing Z.
    Returns None for blanks and garbage.
    """
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None
