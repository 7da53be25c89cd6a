# tradedocs/utils/normalize.py

import math
from typing import Any, Dict, Iterable, List, Optional, Sequence

from domain.models import BLANK_PO, InvoiceHeader, InvoiceLine, PackingListLine
from utils.formatting import round_cbm

# Rows coming from the database (or older exports) name the same concept in
# several ways. First non-blank key wins.
PER_CARTON_ALIASES: Dict[str, Sequence[str]] = {
    "nw": ("nw_per_carton", "nw_per_ctn", "nw_per_cartons"),
    "gw": ("gw_per_carton", "gw_per_ctn", "gw_per_cartons"),
    "cbm": ("cbm_per_carton", "cbm_per_ctn", "cbm_per_cartons"),
}

# Used to derive a per-carton value when only a line total is present
LINE_TOTAL_ALIASES: Dict[str, Sequence[str]] = {
    "nw": ("total_nw", "nw"),
    "gw": ("total_gw", "gw"),
    "cbm": ("total_cbm",),
}

QTY_ALIASES = ("qty", "shipped_qty", "order_qty")
CARTON_FROM_ALIASES = ("carton_no_from", "ct_no_from")
CARTON_TO_ALIASES = ("carton_no_to", "ct_no_to")

_TRUE_STRINGS = {"true", "t", "1", "yes", "y"}


def is_blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and v.strip() == "")


def pick_first(row: Dict[str, Any], aliases: Iterable[str]) -> Any:
    for key in aliases:
        val = row.get(key)
        if not is_blank(val):
            return val
    return None


def to_number(v: Any) -> float:
    """
    Coerce a numeric field. Blank, non-numeric, NaN, infinite and negative
    values all become 0 so they cannot poison totals.
    """
    if is_blank(v) or isinstance(v, bool):
        return 0.0
    try:
        x = float(str(v).strip()) if isinstance(v, str) else float(v)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(x) or x < 0:
        return 0.0
    return x


def to_count(v: Any) -> int:
    return int(math.floor(to_number(v)))


def to_optional_int(v: Any) -> Optional[int]:
    if is_blank(v) or isinstance(v, bool):
        return None
    try:
        x = float(str(v).strip()) if isinstance(v, str) else float(v)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(x) or x < 0:
        return None
    return int(x)


def to_text(v: Any) -> str:
    return "" if v is None else str(v).strip()


def to_flag(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        return v.strip().lower() in _TRUE_STRINGS
    return bool(v)


def to_optional_flag(v: Any) -> Optional[bool]:
    return None if is_blank(v) else to_flag(v)


def normalize_po_no(v: Any) -> str:
    return to_text(v) or BLANK_PO


def pick_per_carton(row: Dict[str, Any], base: str, cartons: int) -> float:
    """
    Resolve the per-carton value for `base` ("nw", "gw" or "cbm").

    Falls back to total / cartons when only a line total is stored.
    """
    val = pick_first(row, PER_CARTON_ALIASES[base])
    if val is not None:
        return to_number(val)

    total = pick_first(row, LINE_TOTAL_ALIASES[base])
    if total is not None and cartons > 0:
        return to_number(total) / cartons
    return 0.0


def normalize_packing_line(row: Dict[str, Any]) -> PackingListLine:
    cartons = to_count(row.get("cartons"))
    return PackingListLine(
        id=to_text(row.get("id")),
        po_no=to_text(row.get("po_no")),
        style_no=to_text(row.get("style_no")),
        description=to_text(row.get("description")),
        cartons=cartons,
        carton_no_from=to_optional_int(pick_first(row, CARTON_FROM_ALIASES)),
        carton_no_to=to_optional_int(pick_first(row, CARTON_TO_ALIASES)),
        qty=to_number(pick_first(row, QTY_ALIASES)),
        nw_per_carton=pick_per_carton(row, "nw", cartons),
        gw_per_carton=pick_per_carton(row, "gw", cartons),
        cbm_per_carton=round_cbm(pick_per_carton(row, "cbm", cartons)),
        line_no=to_optional_int(row.get("line_no")),
        is_deleted=to_flag(row.get("is_deleted")),
    )


def normalize_packing_lines(rows: Iterable[Dict[str, Any]]) -> List[PackingListLine]:
    return [normalize_packing_line(r) for r in rows or []]


def normalize_invoice_line(row: Dict[str, Any]) -> InvoiceLine:
    return InvoiceLine(
        id=to_text(row.get("id")),
        po_no=to_text(row.get("po_no")),
        style_no=to_text(row.get("style_no")),
        line_no=to_optional_int(row.get("line_no")),
        description=to_text(row.get("description")),
        material_content=to_text(row.get("material_content")),
        hs_code=to_text(row.get("hs_code")),
        qty=to_number(pick_first(row, QTY_ALIASES)),
        unit_price=to_number(row.get("unit_price")),
        is_deleted=to_flag(row.get("is_deleted")),
    )


def normalize_invoice_lines(rows: Iterable[Dict[str, Any]]) -> List[InvoiceLine]:
    return [normalize_invoice_line(r) for r in rows or []]


def normalize_invoice_header(row: Dict[str, Any]) -> InvoiceHeader:
    row = row or {}
    total = row.get("total_amount")
    return InvoiceHeader(
        invoice_no=to_text(row.get("invoice_no")),
        buyer_name=to_text(row.get("buyer_name")),
        buyer_code=to_text(row.get("buyer_code")),
        currency=to_text(row.get("currency")) or "USD",
        total_amount=None if is_blank(total) else to_number(total),
        shipping_origin_code=to_text(row.get("shipping_origin_code")),
        show_material_hs=to_optional_flag(row.get("show_material_hs")),
        pdf_show_material=(to_text(row.get("pdf_show_material")) or "AUTO").upper(),
        pdf_show_hs_code=(to_text(row.get("pdf_show_hs_code")) or "AUTO").upper(),
    )
