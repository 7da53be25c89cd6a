"""
End-to-end tests: raw rows in, grouped document and exports out.
"""

import pytest

from domain.models import InvoiceHeader, LastCartonOverride
from services.invoice_service import (
    build_invoice,
    invoice_csv,
    invoice_dataframe,
    invoice_table_rows,
)
from services.line_splitter import split_last_carton
from services.packing_list_service import (
    build_packing_list,
    packing_list_csv,
    packing_list_dataframe,
    packing_list_table_rows,
    recompute_packing_list,
)
from services.totals import invoice_grand_total


@pytest.fixture
def packing_rows():
    return [
        {"id": "a", "po_no": "PO-1", "style_no": "A", "cartons": 2, "qty": 40,
         "nw_per_ctn": 8, "gw_per_ctn": 9, "cbm_per_carton": 0.04},
        {"id": "b", "po_no": "PO-1", "style_no": "B", "cartons": 3, "shipped_qty": 60,
         "nw_per_carton": 10, "gw_per_carton": 11, "cbm_per_carton": "0.05"},
        {"id": "c", "po_no": "PO-2", "cartons": 1, "qty": 5, "nw_per_carton": 4,
         "gw_per_carton": 4.5, "cbm_per_carton": 0.02},
        {"id": "x", "po_no": "PO-3", "cartons": 9, "qty": 900, "is_deleted": True},
    ]


@pytest.fixture
def invoice_rows():
    return [
        {"id": "1", "po_no": "PO-2", "style_no": "S1", "line_no": 1, "qty": 10, "unit_price": 2},
        {"id": "2", "po_no": "PO-1", "style_no": "S2", "line_no": 1, "qty": 1000, "unit_price": 1.5},
        {"id": "3", "po_no": "", "style_no": "S3", "qty": 1, "unit_price": 0.25},
    ]


class TestPackingListDocument:

    def test_build_assigns_ranges_and_totals(self, packing_rows):
        doc = build_packing_list(packing_rows)
        ranges = {ln.id: (ln.carton_no_from, ln.carton_no_to) for ln in doc.lines}

        assert ranges["a"] == (1, 2)
        assert ranges["b"] == (3, 5)
        assert ranges["c"] == (6, 6)
        assert ranges["x"] == (None, None)
        assert [g.po_no for g in doc.groups] == ["PO-1", "PO-2"]
        assert doc.totals.total_cartons == 6
        assert doc.totals.total_qty == 105

    def test_split_after_sequencing(self, packing_rows):
        lines = recompute_packing_list(build_packing_list(packing_rows, auto_carton_no=False).lines)
        override = LastCartonOverride(qty=10, nw_per_carton=3, gw_per_carton=3.5, cbm_per_carton=0.01)

        lines = split_last_carton(lines, "b", override)
        doc = build_packing_list(lines)

        po1 = doc.groups[0]
        assert [(ln.id, ln.carton_no_from, ln.carton_no_to) for ln in po1.lines] == [
            ("a", 1, 2),
            ("b", 3, 4),
            ("b__LAST5", 5, 5),
        ]
        assert po1.subtotal_cartons == 5
        # the bulk part keeps its qty, so the split adds the LAST CTN qty on top
        assert po1.subtotal_qty == 40 + 60 + 10

    def test_table_rows(self, packing_rows):
        doc = build_packing_list(packing_rows)
        rows = packing_list_table_rows(doc)

        assert [r["kind"] for r in rows] == [
            "po", "line", "line", "subtotal", "po", "line", "subtotal", "total",
        ]
        assert rows[0]["label"] == "PO# PO-1"
        assert rows[2]["C/T No"] == "3-5"
        assert rows[2]["Total NW"] == "30.0"
        assert rows[2]["Total CBM"] == "0.15"
        assert rows[5]["C/T No"] == "6"
        assert rows[-1]["Cartons"] == "6"
        assert rows[-1]["Qty(Total)"] == "105"

    def test_last_carton_marker_stripped_in_rows(self):
        doc = build_packing_list(
            [{"id": "z", "po_no": "PO-1", "description": "Tee (LAST CTN)", "cartons": 1}]
        )

        line_row = packing_list_table_rows(doc)[1]
        df = packing_list_dataframe(doc)

        assert line_row["Description"] == "Tee"
        assert df.loc[0, "Description"] == "Tee"
        assert bool(df.loc[0, "Last CTN"]) is True

    def test_dataframe_and_csv(self, packing_rows):
        doc = build_packing_list(packing_rows)
        df = packing_list_dataframe(doc)

        assert list(df["Style No"]) == ["A", "B", ""]
        assert df["Qty"].sum() == 105
        assert packing_list_csv(doc).decode("utf-8").splitlines()[0].startswith("PO No,C/T No")

    def test_empty_packing_list(self):
        doc = build_packing_list([])

        assert doc.groups == []
        assert packing_list_table_rows(doc)[-1]["kind"] == "total"
        assert packing_list_dataframe(doc).empty


class TestInvoiceDocument:

    def test_build_invoice(self, invoice_rows):
        doc = build_invoice({"invoice_no": "INV-1", "buyer_name": "ACME"}, invoice_rows)

        assert [g.po_no for g in doc.groups] == ["-", "PO-1", "PO-2"]
        assert doc.totals.total_amount == 1520.25
        assert doc.grand_total == 1520.25
        assert "Material" not in doc.columns

    def test_table_rows_follow_columns(self, invoice_rows):
        doc = build_invoice(InvoiceHeader(invoice_no="INV-LDC-1"), invoice_rows)
        rows = invoice_table_rows(doc)

        line_rows = [r for r in rows if r["kind"] == "line"]
        assert all("Material" in r and "HS Code" in r for r in line_rows)
        po1_line = next(r for r in line_rows if r["PO No"] == "PO-1")
        assert po1_line["Qty"] == "1,000"
        assert po1_line["Amount"] == "1,500.00"
        assert rows[-1]["Amount"] == "USD 1,520.25"

    def test_dataframe_without_material_columns(self, invoice_rows):
        doc = build_invoice({"buyer_name": "ACME"}, invoice_rows)
        df = invoice_dataframe(doc)

        assert "Material" not in df.columns
        assert "HS Code" not in df.columns
        assert df["Amount"].sum() == pytest.approx(1520.25)
        assert invoice_csv(doc).startswith(b"PO No,Style No,Line No,Description,Qty")

    def test_stored_header_total_wins(self, invoice_rows):
        doc = build_invoice({"buyer_name": "ACME", "total_amount": "2000"}, invoice_rows)

        assert doc.grand_total == 2000.0
        assert doc.totals.total_amount == 1520.25

    def test_zero_header_total_is_ignored(self, invoice_rows):
        doc = build_invoice({"buyer_name": "ACME", "total_amount": 0}, invoice_rows)

        assert invoice_grand_total(doc.header, doc.lines) == 1520.25
