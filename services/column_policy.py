# tradedocs/services/column_policy.py

from typing import List, Sequence

from domain.models import InvoiceHeader, InvoiceLine, MaterialHsColumns

# Buyers whose invoice/PO identity contains this always get Material/HS columns
LDC_MARKER = "LDC"

BASE_COLUMNS = ["PO No", "Style No", "Description"]
MATERIAL_COLUMN = "Material"
HS_CODE_COLUMN = "HS Code"
TAIL_COLUMNS = ["Qty", "Unit Price", "Amount"]


def is_ldc_buyer(header: InvoiceHeader) -> bool:
    if header is None:
        return False
    text = f"{header.buyer_name or ''} {header.buyer_code or ''} {header.invoice_no or ''}"
    return LDC_MARKER in text.upper()


def _has_text(v) -> bool:
    return v is not None and str(v).strip() != ""


def should_show_material_hs(header: InvoiceHeader, lines: Sequence[InvoiceLine]) -> bool:
    """
    Material/HS Code columns rule:
      - LDC buyer: always shown, even when every value is blank
      - anyone else: shown only when at least one live line has a material
        or an HS code; otherwise the columns are left out entirely
    """
    if is_ldc_buyer(header):
        return True
    return any(
        _has_text(line.material_content) or _has_text(line.hs_code)
        for line in lines or []
        if not line.is_deleted
    )


def _any_live(lines: Sequence[InvoiceLine], field: str) -> bool:
    return any(_has_text(getattr(line, field)) for line in lines or [] if not line.is_deleted)


def _resolve_tri(mode: str, auto_value: bool) -> bool:
    mode = (mode or "AUTO").upper()
    if mode == "ON":
        return True
    if mode == "OFF":
        return False
    return auto_value


def resolve_material_hs_columns(header: InvoiceHeader, lines: Sequence[InvoiceLine]) -> MaterialHsColumns:
    """
    Per-column decision, taking the invoice's own display settings into
    account when the buyer is not LDC:
      1. header.show_material_hs forces both columns on or off
      2. otherwise pdf_show_material / pdf_show_hs_code (ON/OFF/AUTO)
    AUTO shows a column when any live line has a value for it.
    """
    if header is None or is_ldc_buyer(header):
        auto = should_show_material_hs(header, lines)
        return MaterialHsColumns(show_material=auto, show_hs_code=auto)

    if header.show_material_hs is not None:
        forced = bool(header.show_material_hs)
        return MaterialHsColumns(show_material=forced, show_hs_code=forced)

    return MaterialHsColumns(
        show_material=_resolve_tri(header.pdf_show_material, _any_live(lines, "material_content")),
        show_hs_code=_resolve_tri(header.pdf_show_hs_code, _any_live(lines, "hs_code")),
    )


def invoice_table_columns(header: InvoiceHeader, lines: Sequence[InvoiceLine]) -> List[str]:
    columns = resolve_material_hs_columns(header, lines)
    optional = []
    if columns.show_material:
        optional.append(MATERIAL_COLUMN)
    if columns.show_hs_code:
        optional.append(HS_CODE_COLUMN)
    return [*BASE_COLUMNS, *optional, *TAIL_COLUMNS]
