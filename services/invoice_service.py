# tradedocs/services/invoice_service.py

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from domain.models import InvoiceDocument, InvoiceHeader, InvoiceLine
from services.aggregator import group_invoice_lines
from services.column_policy import HS_CODE_COLUMN, MATERIAL_COLUMN, invoice_table_columns
from services.totals import invoice_grand_total, invoice_totals
from utils.formatting import format_money, format_qty
from utils.normalize import normalize_invoice_header, normalize_invoice_lines

logger = logging.getLogger(__name__)


def build_invoice(
        header: Union[InvoiceHeader, Dict[str, Any], None],
        rows: Iterable[Union[InvoiceLine, Dict[str, Any]]],
) -> InvoiceDocument:
    """
    Build an InvoiceDocument from the header row and line rows as stored
    (or already normalized objects).
    """
    if not isinstance(header, InvoiceHeader):
        header = normalize_invoice_header(header or {})

    rows = list(rows or [])
    if all(isinstance(r, InvoiceLine) for r in rows):
        lines: List[InvoiceLine] = rows
    else:
        lines = normalize_invoice_lines(rows)

    groups = group_invoice_lines(lines)
    totals = invoice_totals(lines)
    columns = invoice_table_columns(header, lines)

    logger.info(
        "Built invoice %s: %d PO groups, Material/HS %s",
        header.invoice_no or "-",
        len(groups),
        "shown" if MATERIAL_COLUMN in columns or HS_CODE_COLUMN in columns else "hidden",
    )

    return InvoiceDocument(
        header=header,
        lines=lines,
        groups=groups,
        totals=totals,
        columns=columns,
        grand_total=invoice_grand_total(header, lines),
    )


def _line_values(line: InvoiceLine) -> Dict[str, str]:
    return {
        "PO No": line.po_no,
        "Style No": line.style_no,
        "Description": line.description,
        MATERIAL_COLUMN: line.material_content,
        HS_CODE_COLUMN: line.hs_code,
        "Qty": format_qty(line.qty),
        "Unit Price": format_money(line.unit_price),
        "Amount": format_money(line.amount),
    }


def _with_currency(amount: float, currency: Optional[str]) -> str:
    return f"{currency} {format_money(amount)}".strip()


def invoice_table_rows(document: InvoiceDocument) -> List[Dict[str, Any]]:
    """
    Display rows in print order, restricted to `document.columns`.
    Row kinds are "po", "line", "subtotal" and "total" like the packing
    list rows.
    """
    columns = document.columns
    currency = document.header.currency
    rows: List[Dict[str, Any]] = []

    for group in document.groups:
        rows.append({"kind": "po", "label": f"PO# {group.po_no}"})
        for line in group.lines:
            values = _line_values(line)
            rows.append({"kind": "line", **{col: values[col] for col in columns}})

        subtotal = {col: "" for col in columns}
        subtotal["Description"] = f"PO# {group.po_no} Subtotal"
        subtotal["Qty"] = format_qty(group.subtotal_qty)
        subtotal["Amount"] = _with_currency(group.subtotal_amount, currency)
        rows.append({"kind": "subtotal", **subtotal})

    total = {col: "" for col in columns}
    total["Description"] = "Grand Total"
    total["Qty"] = format_qty(document.totals.total_qty)
    total["Amount"] = _with_currency(document.grand_total, currency)
    rows.append({"kind": "total", **total})
    return rows


def invoice_dataframe(document: InvoiceDocument) -> pd.DataFrame:
    """
    One row per live line with raw numbers; Material/HS Code columns are
    only present when the invoice shows them.
    """
    show = set(document.columns)
    records = []
    for group in document.groups:
        for line in group.lines:
            record = {
                "PO No": group.po_no,
                "Style No": line.style_no,
                "Line No": line.line_no,
                "Description": line.description,
            }
            if MATERIAL_COLUMN in show:
                record[MATERIAL_COLUMN] = line.material_content
            if HS_CODE_COLUMN in show:
                record[HS_CODE_COLUMN] = line.hs_code
            record.update({"Qty": line.qty, "Unit Price": line.unit_price, "Amount": line.amount})
            records.append(record)

    columns = ["PO No", "Style No", "Line No", "Description"]
    columns += [c for c in (MATERIAL_COLUMN, HS_CODE_COLUMN) if c in show]
    columns += ["Qty", "Unit Price", "Amount"]
    return pd.DataFrame(records, columns=columns)


def invoice_csv(document: InvoiceDocument) -> bytes:
    return invoice_dataframe(document).to_csv(index=False).encode("utf-8")
