# services/api/models/line_item.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


def _first_present(raw: Dict[str, Any], *keys: str) -> Any:
  """First value that is not None (missing keys count as None)."""
  for k in keys:
    v = raw.get(k)
    if v is not None:
      return v
  return None


def _first_truthy(raw: Dict[str, Any], *keys: str) -> Any:
  """First value that is truthy; "" / 0 / False fall through."""
  for k in keys:
    v = raw.get(k)
    if v:
      return v
  return None


def _text(v: Any) -> str:
  return "" if v is None else str(v)


@dataclass
class LineItem:
  """
  Canonical line item used by every printed view.

  Upstream item records are not schema-enforced (different screens wrote
  different field names over time), so synonyms are resolved here, once.
  Money fields stay None when the source had nothing, so views can print
  an empty cell instead of 0.00.
  """

  quantity: str = ""
  description: str = ""
  unit_price: Optional[Any] = None
  total: Optional[Any] = None

  size: str = ""
  glass: str = ""
  thickness: str = ""
  edge: str = ""
  tempered: bool = False

  # notes printed on shop-facing views (ticket)
  shop_notes: str = ""
  # notes printed on the packing list
  notes: str = ""

  @classmethod
  def from_raw(cls, raw: Any) -> "LineItem":
    if not isinstance(raw, dict):
      return cls(description=_text(raw))

    qty = _first_present(raw, "qty", "quantity")
    width, height = raw.get("width"), raw.get("height")
    size = f"{width} x {height}" if width and height else _text(raw.get("size") or "")
    glass = _text(_first_truthy(raw, "glassType", "type") or "")
    thickness = _text(_first_truthy(raw, "thickness", "thk") or "")

    bevel = raw.get("bevel")
    edge = _text(raw.get("edgework") or (f"Bevel {raw.get('bevelWidth') or ''}" if bevel else ""))

    description = _first_present(raw, "description", "name")
    if description is None:
      edge_or_bevel = ""
      if raw.get("edgework") or bevel:
        bevel_width = (raw.get("bevelWidth") or "") if bevel else ""
        edge_or_bevel = f"Edge/Bevel: {raw.get('edgework') or ''} {bevel_width}"
      parts = [
        _first_truthy(raw, "glassType", "type"),
        raw.get("thickness"),
        f"{width} x {height}" if width and height else "",
        edge_or_bevel,
        raw.get("notes"),
      ]
      description = " • ".join(_text(p) for p in parts if p)

    return cls(
      quantity=_text(qty),
      description=_text(description),
      unit_price=_first_present(raw, "unitPrice", "price"),
      total=_first_present(raw, "total", "lineTotal"),
      size=size,
      glass=glass,
      thickness=thickness,
      edge=edge,
      tempered=bool(raw.get("tempered") or raw.get("temp")),
      shop_notes=_text(_first_truthy(raw, "notes", "instructions", "descNotes", "description") or ""),
      notes=_text(_first_truthy(raw, "notes", "instructions") or ""),
    )


def normalize_items(items: Any) -> List[LineItem]:
  """Loose `items` field -> list of LineItem. Non-lists become []."""
  if not isinstance(items, list):
    return []
  return [LineItem.from_raw(it) for it in items]
