# tradedocs/services/packing_list_service.py

import logging
from typing import Any, Dict, Iterable, List, Sequence, Union

import pandas as pd

from domain.models import PackingListDocument, PackingListLine
from services.aggregator import group_packing_lines
from services.carton_sequencer import sequence_cartons
from services.totals import packing_list_totals
from utils.formatting import (
    format_carton_range,
    format_cbm,
    format_qty,
    format_weight,
    split_last_carton_marker,
)
from utils.normalize import normalize_packing_lines

logger = logging.getLogger(__name__)

PACKING_LIST_COLUMNS = [
    "C/T No",
    "PO #",
    "Style #",
    "Description",
    "Cartons",
    "Qty(Total)",
    "NW/CTN",
    "GW/CTN",
    "CBM/CTN",
    "Total NW",
    "Total GW",
    "Total CBM",
]


def _as_lines(rows: Iterable[Union[PackingListLine, Dict[str, Any]]]) -> List[PackingListLine]:
    rows = list(rows or [])
    if all(isinstance(r, PackingListLine) for r in rows):
        return rows
    return normalize_packing_lines(rows)


def recompute_packing_list(lines: Sequence[PackingListLine]) -> List[PackingListLine]:
    """
    Flat collection to save after an edit: C/T No ranges filled in.
    Totals need no extra step because they are derived on read.
    """
    return sequence_cartons(lines)


def build_packing_list(
        rows: Iterable[Union[PackingListLine, Dict[str, Any]]],
        auto_carton_no: bool = True,
) -> PackingListDocument:
    """
    Build a PackingListDocument from raw database rows (or lines that were
    already normalized).

    With `auto_carton_no`, missing C/T No ranges are filled in first.
    """
    lines = _as_lines(rows)
    if auto_carton_no:
        lines = recompute_packing_list(lines)

    groups = group_packing_lines(lines)
    totals = packing_list_totals(lines)

    logger.info(
        "Built packing list: %d PO groups, %d cartons",
        len(groups),
        totals.total_cartons,
    )

    return PackingListDocument(lines=lines, groups=groups, totals=totals)


# ---------------------------------------------------------------------------
# Table rows for renderers (PDF table builder, UI table)
# ---------------------------------------------------------------------------

def _line_row(line: PackingListLine) -> Dict[str, str]:
    description, _ = split_last_carton_marker(line.description)
    return {
        "C/T No": format_carton_range(line.carton_no_from, line.carton_no_to),
        "PO #": line.po_no,
        "Style #": line.style_no,
        "Description": description,
        "Cartons": format_qty(line.cartons),
        "Qty(Total)": format_qty(line.qty),
        "NW/CTN": format_weight(line.nw_per_carton),
        "GW/CTN": format_weight(line.gw_per_carton),
        "CBM/CTN": format_cbm(line.cbm_per_carton),
        "Total NW": format_weight(line.total_nw),
        "Total GW": format_weight(line.total_gw),
        "Total CBM": format_cbm(line.total_cbm),
    }


def _sum_row(label: str, cartons, qty, nw, gw, cbm) -> Dict[str, str]:
    row = {col: "" for col in PACKING_LIST_COLUMNS}
    row.update(
        {
            "Description": label,
            "Cartons": format_qty(cartons),
            "Qty(Total)": format_qty(qty),
            "Total NW": format_weight(nw),
            "Total GW": format_weight(gw),
            "Total CBM": format_cbm(cbm),
        }
    )
    return row


def packing_list_table_rows(document: PackingListDocument) -> List[Dict[str, Any]]:
    """
    Display rows in print order. Each row has a "kind":
      - "po": PO header row, text in "label"
      - "line": one packing list line, formatted per column
      - "subtotal": PO subtotal
      - "total": grand total (last row)
    """
    rows: List[Dict[str, Any]] = []

    for group in document.groups:
        rows.append({"kind": "po", "label": f"PO# {group.po_no}"})
        for line in group.lines:
            rows.append({"kind": "line", **_line_row(line)})
        rows.append(
            {
                "kind": "subtotal",
                **_sum_row(
                    f"PO# {group.po_no} Subtotal",
                    group.subtotal_cartons,
                    group.subtotal_qty,
                    group.subtotal_nw,
                    group.subtotal_gw,
                    group.subtotal_cbm,
                ),
            }
        )

    totals = document.totals
    rows.append(
        {
            "kind": "total",
            **_sum_row(
                "Grand Total",
                totals.total_cartons,
                totals.total_qty,
                totals.total_nw,
                totals.total_gw,
                totals.total_cbm,
            ),
        }
    )
    return rows


# ---------------------------------------------------------------------------
# Spreadsheet export
# ---------------------------------------------------------------------------

def packing_list_dataframe(document: PackingListDocument) -> pd.DataFrame:
    """
    One row per live line, in group order, with raw numbers for the
    spreadsheet exporter.
    """
    records = []
    for group in document.groups:
        for line in group.lines:
            description, is_last = split_last_carton_marker(line.description)
            records.append(
                {
                    "PO No": group.po_no,
                    "C/T No": format_carton_range(line.carton_no_from, line.carton_no_to),
                    "C/T From": line.carton_no_from,
                    "C/T To": line.carton_no_to,
                    "Style No": line.style_no,
                    "Description": description,
                    "Last CTN": is_last,
                    "Cartons": line.cartons,
                    "Qty": line.qty,
                    "NW/CTN": line.nw_per_carton,
                    "GW/CTN": line.gw_per_carton,
                    "CBM/CTN": line.cbm_per_carton,
                    "Total NW": line.total_nw,
                    "Total GW": line.total_gw,
                    "Total CBM": line.total_cbm,
                }
            )

    columns = [
        "PO No", "C/T No", "C/T From", "C/T To", "Style No", "Description", "Last CTN",
        "Cartons", "Qty", "NW/CTN", "GW/CTN", "CBM/CTN", "Total NW", "Total GW", "Total CBM",
    ]
    return pd.DataFrame(records, columns=columns)


def packing_list_csv(document: PackingListDocument) -> bytes:
    return packing_list_dataframe(document).to_csv(index=False).encode("utf-8")
