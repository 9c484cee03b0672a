"""
Validation and payload normalization utilities for the back office.
Ensures data integrity and provides clear error messages.
"""
import math
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Keys whose values are document ids; never case-folded.
IDENTIFIER_KEYS = frozenset({"id", "orderId"})

PRINT_KINDS = {
    "quote": "quote",
    "ticket": "ticket",
    "packing-list": "packing-list",
    "packinglist": "packing-list",
    "invoice": "invoice",
    "purchase-order": "purchase-order",
    "purchaseorder": "purchase-order",
    "po": "purchase-order",
}


def normalize_strings_upper(value: Any) -> Any:
    """
    Recursively upper-case every string in a JSON-like payload.

    Printed invoices and POs are all caps, so request bodies for those
    documents are normalized before any field is read. Values stored under
    IDENTIFIER_KEYS are left alone so lookups by generated id still match.
    """
    if isinstance(value, list):
        return [normalize_strings_upper(v) for v in value]
    if isinstance(value, dict):
        return {
            k: (v if k in IDENTIFIER_KEYS else normalize_strings_upper(v))
            for k, v in value.items()
        }
    if isinstance(value, str):
        return value.upper()
    return value


def parse_payload(schema: Type[ModelT], payload: Any) -> ModelT:
    """
    Validate a raw request body against a whitelist schema.

    Unknown keys are dropped by the schema; type problems become a
    ValidationError carrying a readable message.

    Raises:
        ValidationError: if the body is not an object or fails validation
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ())) or "body"
        raise ValidationError(f"Invalid value for {loc}: {first.get('msg', 'invalid')}")


def require_text(value: Any, message: str) -> str:
    """
    Return the stripped string, or raise ValidationError(message) if blank.
    """
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(message)
    return text


def coerce_number(value: Any, default: float = 0.0) -> float:
    """
    Best-effort numeric conversion for loosely-typed JSON fields.
    Booleans, blanks, NaN and garbage all fall back to `default`.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        num = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(num) or math.isinf(num):
        return default
    return num


def coerce_sequence_number(value: Any) -> Optional[int]:
    """
    Interpret a client-supplied sequence number.
    Zero, negatives, blanks and non-numbers all mean "not supplied".
    """
    num = coerce_number(value, default=0.0)
    if num <= 0 or not float(num).is_integer():
        return None
    return int(num)


def coerce_print_kind(kind: Optional[str]) -> str:
    """
    Map a requested print kind (and its aliases) to its canonical name.

    Raises:
        ValidationError: for unknown kinds
    """
    key = (kind or "").strip().lower()
    if key not in PRINT_KINDS:
        raise ValidationError("Invalid print type")
    return PRINT_KINDS[key]


def nested_text(doc: Dict[str, Any], *path: str) -> str:
    """Read doc[path[0]][path[1]]... as a string, tolerating missing levels."""
    cur: Any = doc
    for part in path:
        if not isinstance(cur, dict):
            return ""
        cur = cur.get(part)
    return "" if cur is None else str(cur)
