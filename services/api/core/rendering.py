# services/api/core/rendering.py
"""
Printable HTML views of an Order (quote, shop ticket, packing list,
invoice, purchase order) and of a standalone Purchase Order record.

Every value that came from a document goes through `esc` before it is
placed into markup.
"""
from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from datetime import timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from core.identifiers import parse_iso, utc_iso
from core.validation import coerce_number, coerce_print_kind
from models.line_item import LineItem, normalize_items
from models.status import OrderStatus, PurchaseOrderType, po_type_of

logger = logging.getLogger(__name__)

QUOTE_VALID_DAYS = 30
DEFAULT_INVOICE_TERMS = "Due upon receipt"


@dataclass(frozen=True)
class CompanyProfile:
    name: str
    address: str
    phone: str
    email: str
    logo_url: str

    @classmethod
    def from_settings(cls, settings: Any) -> "CompanyProfile":
        return cls(
            name=settings.company_name,
            address=settings.company_address,
            phone=settings.company_phone,
            email=settings.company_email,
            logo_url=settings.company_logo_url,
        )


DEFAULT_COMPANY = CompanyProfile(
    name="Kentucky Mirror and Plate Glass",
    address="822 W Main St, Louisville KY 40202",
    phone="502-583-5541",
    email="info@kymirror.com",
    logo_url="/good%20logo.jpg",
)


# ---------- formatting helpers ----------

def esc(value: Any) -> str:
    """HTML-escape a value; None prints as empty."""
    return html.escape("" if value is None else str(value), quote=True)


def money(value: Any) -> str:
    return f"{coerce_number(value):.2f}"


def money_cell(value: Any) -> str:
    """Blank when the source had no amount, else 2-decimal money."""
    if value is None or value == "":
        return ""
    return esc(money(value))


def fmt_date(value: Any) -> str:
    """M/D/YYYY in UTC, or "" when missing/unparseable."""
    dt = parse_iso(value)
    if dt is None:
        return ""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return f"{dt.month}/{dt.day}/{dt.year}"


def add_days_iso(value: Any, days: int) -> str:
    dt = parse_iso(value)
    if dt is None:
        return ""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return utc_iso(dt + timedelta(days=days))


def invoice_display_number(order: Dict[str, Any]) -> str:
    seq = order.get("sequenceNumber")
    if seq:
        return f"i{seq}"
    number = str(order.get("orderNumber") or "")
    if number[:1] in ("o", "O"):
        return "i" + number[1:]
    return number


# ---------- shared blocks ----------

BASE_STYLES = """
    <style>
      body { font-family: Arial, sans-serif; margin: 24px; color:#000; }
      h1,h2,h3 { margin: 0; }
      .row { display:flex; justify-content:space-between; gap:16px; align-items:flex-start; }
      .box { border:1px solid #000; padding:12px; }
      .small { font-size:12px; }
      table { width:100%; border-collapse:collapse; margin-top:12px; }
      th, td { border:1px solid #000; padding:8px; font-size:12px; vertical-align:top; }
      .right { text-align:right; }
      .totals { width: 320px; margin-left:auto; margin-top:12px; }
      .signature { margin-top:28px; display:flex; gap:24px; }
      .sigline { flex:1; border-top:1px solid #000; padding-top:6px; min-height:24px; }
      @page { margin: 14mm; }
    </style>
"""

TICKET_STYLES = """
  <style>
    body { font-family: Arial, sans-serif; margin: 20px; }
    h1 { margin:0; }
    .meta { margin-top:8px; font-size:13px; }
    table { width:100%; border-collapse:collapse; margin-top:12px; }
    th, td { border:2px solid #000; padding:10px; font-size:13px; vertical-align:top; }
    th { font-size:12px; }
    .notes { margin-top:12px; border:2px solid #000; padding:10px; min-height:80px; }
    @page { margin: 12mm; }
  </style>
"""


def _page(title: str, styles: str, body: str) -> str:
    return (
        "<!doctype html>\n<html>\n<head>\n"
        '  <meta charset="utf-8" />\n'
        f"  <title>{title}</title>\n"
        f"{styles}"
        "</head>\n<body>\n"
        f"{body}"
        "</body>\n</html>"
    )


def company_header(company: CompanyProfile, doc_title: str, show_name: bool = True) -> str:
    name_line = f"<h1>{esc(company.name)}</h1>" if show_name else ""
    return f"""
    <div class="row" style="align-items:center;">
      <div style="display:flex; gap:12px; align-items:center;">
        <img src="{esc(company.logo_url)}" alt="{esc(company.name)} logo" style="height:62px; width:auto;" />
        <div>
          {name_line}
          <div class="small">{esc(company.address)}</div>
          <div class="small">{esc(company.phone)}</div>
          <div class="small">{esc(company.email)}</div>
        </div>
      </div>
      <div class="box"><b>{esc(doc_title)}</b></div>
    </div>
"""


def _rows_or_empty(rows: List[str], colspan: int) -> str:
    if rows:
        return "".join(rows)
    return f'<tr><td colspan="{colspan}">No line items</td></tr>'


def items_table(items: List[LineItem]) -> str:
    rows = [
        f"""
        <tr>
          <td>{idx}</td>
          <td>{esc(it.description)}</td>
          <td class="right">{esc(it.quantity)}</td>
          <td class="right">{money_cell(it.unit_price)}</td>
          <td class="right">{money_cell(it.total)}</td>
        </tr>"""
        for idx, it in enumerate(items, start=1)
    ]
    return f"""
    <table>
      <thead>
        <tr>
          <th style="width:40px;">#</th>
          <th>Description</th>
          <th style="width:70px;">Qty</th>
          <th style="width:90px;">Unit</th>
          <th style="width:90px;">Total</th>
        </tr>
      </thead>
      <tbody>
        {_rows_or_empty(rows, 5)}
      </tbody>
    </table>
"""


def compute_totals(order: Dict[str, Any]) -> Dict[str, float]:
    """subtotal = grandTotal; total = grandTotalWithTax ?? grandTotal; tax never negative."""
    subtotal = coerce_number(order.get("grandTotal"))
    with_tax = order.get("grandTotalWithTax")
    total = coerce_number(with_tax if with_tax is not None else order.get("grandTotal"))
    return {"subtotal": subtotal, "tax": max(0.0, total - subtotal), "total": total}


def totals_block(order: Dict[str, Any]) -> str:
    t = compute_totals(order)
    return f"""
    <table class="totals">
      <tr><td>Subtotal</td><td class="right">{esc(money(t["subtotal"]))}</td></tr>
      <tr><td>Tax</td><td class="right">{esc(money(t["tax"]))}</td></tr>
      <tr><td><b>Total</b></td><td class="right"><b>{esc(money(t["total"]))}</b></td></tr>
    </table>
"""


def _customer_lines(customer: Dict[str, Any]) -> str:
    fields = ("name", "company", "phone", "email", "address")
    return "<br/>\n      ".join(esc(customer.get(f) or "") for f in fields)


def _customer_label(customer: Dict[str, Any]) -> str:
    return esc(customer.get("name") or customer.get("company") or "")


# ---------- order views ----------

def render_quote(order: Dict[str, Any], company: CompanyProfile, now: Callable[[], str]) -> str:
    saved = order.get("createdAt") or now()
    valid_through = add_days_iso(saved, QUOTE_VALID_DAYS)
    customer = order.get("customer") or {}
    number = esc(order.get("orderNumber") or "")

    body = f"""{company_header(company, "QUOTE")}
  <div class="row" style="margin-top:12px;">
    <div></div>
    <div class="box">
      <div>Quote #: <b>{number}</b></div>
      <div>Date Saved: {esc(fmt_date(saved))}</div>
      <div>Valid Through: <b>{esc(fmt_date(valid_through))}</b></div>
    </div>
  </div>

  <div class="row" style="margin-top:12px;">
    <div class="box" style="flex:1;">
      <b>Customer</b><br/>
      {_customer_lines(customer)}
    </div>
    <div class="box" style="flex:1;">
      <b>Notes</b><br/>
      {esc(order.get("notes") or "")}
    </div>
  </div>

  {items_table(normalize_items(order.get("items")))}
  {totals_block(order)}

  <p class="small" style="margin-top:12px;">
    This quote is good for <b>{QUOTE_VALID_DAYS} days</b> from <b>{esc(fmt_date(saved))}</b>.
  </p>

  <div class="signature">
    <div style="flex:2;"><div class="sigline">Customer Signature</div></div>
    <div style="flex:1;"><div class="sigline">Date</div></div>
  </div>
"""
    return _page(f"Quote {number}", BASE_STYLES, body)


def render_ticket(order: Dict[str, Any], company: CompanyProfile, now: Callable[[], str]) -> str:
    saved = order.get("createdAt") or now()
    customer = order.get("customer") or {}
    number = esc(order.get("orderNumber") or "")

    rows = [
        f"""
        <tr>
          <td>{idx}</td>
          <td class="right"><b>{esc(it.quantity)}</b></td>
          <td><b>{esc(it.size)}</b></td>
          <td>{esc(it.glass)}</td>
          <td>{esc(it.thickness)}</td>
          <td>{esc(it.edge)}</td>
          <td class="right">{"YES" if it.tempered else ""}</td>
          <td>{esc(it.shop_notes)}</td>
        </tr>"""
        for idx, it in enumerate(normalize_items(order.get("items")), start=1)
    ]

    body = f"""{company_header(company, "SHOP TICKET")}
  <div class="meta">
    Order #: <b>{number}</b> &nbsp; | &nbsp;
    Date Saved: {esc(fmt_date(saved))} &nbsp; | &nbsp;
    Customer: {_customer_label(customer)}
  </div>

  <table>
    <thead>
      <tr>
        <th style="width:40px;">#</th>
        <th style="width:70px;">Qty</th>
        <th style="width:140px;">Size</th>
        <th style="width:140px;">Glass</th>
        <th style="width:70px;">Thk</th>
        <th style="width:140px;">Edge/Bevel</th>
        <th style="width:70px;">Temp</th>
        <th>Notes</th>
      </tr>
    </thead>
    <tbody>
      {_rows_or_empty(rows, 8)}
    </tbody>
  </table>

  <div class="notes">
    <b>Shop Notes:</b><br/>
    {esc(order.get("shopNotes") or order.get("notes") or "")}
  </div>
"""
    return _page(f"Shop Ticket {number}", TICKET_STYLES, body)


def render_packing_list(order: Dict[str, Any], company: CompanyProfile, now: Callable[[], str]) -> str:
    saved = order.get("createdAt") or now()
    customer = order.get("customer") or {}
    number = esc(order.get("orderNumber") or "")
    # only the legacy "vendor" status marks vendor-sourced glass here
    from_vendor = order.get("status") == OrderStatus.VENDOR.value

    vendor_meta = ""
    if from_vendor:
        vendor_meta = (
            f' &nbsp; | &nbsp; Vendor: <b>{esc(order.get("vendorName") or "")}</b>'
            f' &nbsp; | &nbsp; PO #: <b>{esc(order.get("vendorPoNumber") or "")}</b>'
        )

    rows = [
        f"""
        <tr>
          <td>{idx}</td>
          <td class="right">{esc(it.quantity)}</td>
          <td>{esc(it.size)}</td>
          <td>{esc(it.glass)}</td>
          <td>{esc(it.notes)}</td>
        </tr>"""
        for idx, it in enumerate(normalize_items(order.get("items")), start=1)
    ]

    body = f"""{company_header(company, "PACKING LIST")}
  <div class="meta" style="margin-top:10px;font-size:13px;">
    Order #: <b>{number}</b> &nbsp; | &nbsp;
    Order Date: {esc(fmt_date(saved))} &nbsp; | &nbsp;
    Customer: {_customer_label(customer)} &nbsp; | &nbsp;
    Source: <b>{"Vendor" if from_vendor else "Shop"}</b>{vendor_meta}
  </div>

  <table>
    <thead>
      <tr>
        <th style="width:40px;">#</th>
        <th style="width:80px;">Qty</th>
        <th style="width:180px;">Size</th>
        <th style="width:220px;">Glass Type</th>
        <th>Notes</th>
      </tr>
    </thead>
    <tbody>
      {_rows_or_empty(rows, 5)}
    </tbody>
  </table>

  {totals_block(order)}
"""
    return _page(f"Packing List {number}", BASE_STYLES, body)


def render_order_purchase_order(order: Dict[str, Any], company: CompanyProfile, now: Callable[[], str]) -> str:
    requested = order.get("requestedDate") or order.get("createdAt") or now()
    number = esc(order.get("orderNumber") or "")

    body = f"""{company_header(company, "PURCHASE ORDER")}
  <div class="row" style="margin-top:12px;">
    <div class="box" style="flex:1;">
      <b>Vendor</b><br/>
      {esc(order.get("vendorName") or "")}
    </div>
    <div class="box" style="flex:1;">
      <div>Order #: <b>{number}</b></div>
      <div>PO #: <b>{esc(order.get("vendorPoNumber") or "")}</b></div>
      <div>Requested Date: <b>{esc(fmt_date(requested))}</b></div>
      <div>Order Date: {esc(fmt_date(order.get("createdAt")))}</div>
    </div>
  </div>
  {items_table(normalize_items(order.get("items")))}
  {totals_block(order)}
"""
    return _page(f"Purchase Order {number}", BASE_STYLES, body)


def render_invoice(order: Dict[str, Any], company: CompanyProfile, now: Callable[[], str]) -> str:
    invoice_date = order.get("invoiceDate") or order.get("createdAt") or now()
    customer = order.get("customer") or {}

    body = f"""{company_header(company, "INVOICE")}
  <div class="row" style="margin-top:12px;">
    <div></div>
    <div class="box">
      <div><b>INVOICE</b></div>
      <div>Invoice #: <b>{esc(invoice_display_number(order))}</b></div>
      <div>Invoice Date: {esc(fmt_date(invoice_date))}</div>
      <div>Order Date: {esc(fmt_date(order.get("createdAt")))}</div>
    </div>
  </div>

  <div class="box" style="margin-top:12px;">
    <b>Bill To</b><br/>
    {_customer_lines(customer)}
  </div>

  {items_table(normalize_items(order.get("items")))}
  {totals_block(order)}

  <p class="small" style="margin-top:12px;">
    Terms: {esc(order.get("terms") or DEFAULT_INVOICE_TERMS)}<br/>
    Thank you for your business.
  </p>
"""
    return _page(f"Invoice {esc(order.get('orderNumber') or '')}", BASE_STYLES, body)


RENDERERS = {
    "quote": render_quote,
    "ticket": render_ticket,
    "packing-list": render_packing_list,
    "invoice": render_invoice,
    "purchase-order": render_order_purchase_order,
}


def render(
    order: Dict[str, Any],
    kind: Optional[str],
    company: CompanyProfile = DEFAULT_COMPANY,
    now: Callable[[], str] = utc_iso,
) -> str:
    """
    Render an Order as one of the printable views.

    Raises:
        ValidationError: unknown print kind ("Invalid print type")
    """
    canonical = coerce_print_kind(kind)
    logger.debug(f"Rendering {canonical} for order {order.get('id') or order.get('orderNumber')}")
    return RENDERERS[canonical](order, company, now)


# ---------- standalone purchase order ----------

def render_purchase_order_record(po: Dict[str, Any], company: CompanyProfile = DEFAULT_COMPANY) -> str:
    internal = po_type_of(po.get("poType")) is PurchaseOrderType.INTERNAL
    title = "INTERNAL PO" if internal else "PURCHASE ORDER"
    items = po.get("items") if isinstance(po.get("items"), list) else []

    rows = []
    for idx, it in enumerate(items, start=1):
        it = it if isinstance(it, dict) else {"description": it}
        qty = it.get("qty")
        rows.append(f"""
    <tr>
      <td>{idx}</td>
      <td>{esc(it.get("description") or it.get("name") or "")}</td>
      <td class="right">{esc("" if qty is None else qty)}</td>
    </tr>""")

    body = f"""{company_header(company, title, show_name=False)}
<div class="row" style="margin-top:12px;">
  <div class="box" style="flex:1;">
    <b>Vendor</b><br/>{esc(po.get("vendor") or "")}
  </div>
  <div class="box" style="flex:1;">
    <div>Order #: <b>{esc(po.get("orderNumber") or "")}</b></div>
    <div>PO #: <b>{esc(po.get("poNumber") or "")}</b></div>
    <div>Requested Date: <b>{esc(fmt_date(po.get("requestedDate")))}</b></div>
    <div>Order Date: {esc(fmt_date(po.get("dateOrdered")))}</div>
  </div>
</div>
<table>
  <thead><tr><th style="width:40px;">#</th><th>Description</th><th style="width:70px;">Qty</th></tr></thead>
  <tbody>{_rows_or_empty(rows, 3)}</tbody>
</table>
"""
    page_title = f"{'Internal PO' if internal else 'Purchase Order'} {esc(po.get('poNumber') or '')}"
    return _page(page_title, BASE_STYLES, body)
