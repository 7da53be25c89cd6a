import itertools

import pytest

from domain.models import InvoiceHeader, InvoiceLine, PackingListLine

_ids = itertools.count(1)


def make_line(**kwargs) -> PackingListLine:
    kwargs.setdefault("id", f"pl-{next(_ids)}")
    return PackingListLine(**kwargs)


def make_invoice_line(**kwargs) -> InvoiceLine:
    kwargs.setdefault("id", f"inv-{next(_ids)}")
    return InvoiceLine(**kwargs)


@pytest.fixture
def shipment_lines():
    """Three lines over two POs, no C/T No entered yet."""
    return [
        make_line(id="b", po_no="PO-1", style_no="B", cartons=3, qty=60,
                  nw_per_carton=10.0, gw_per_carton=11.0, cbm_per_carton=0.05),
        make_line(id="c", po_no="PO-2", style_no="C", cartons=1, qty=5,
                  nw_per_carton=4.0, gw_per_carton=4.5, cbm_per_carton=0.02),
        make_line(id="a", po_no="PO-1", style_no="A", cartons=2, qty=40,
                  nw_per_carton=8.0, gw_per_carton=9.0, cbm_per_carton=0.04),
    ]


@pytest.fixture
def acme_header():
    return InvoiceHeader(invoice_no="INV-2024-001", buyer_name="ACME", buyer_code="AC")


@pytest.fixture
def ldc_header():
    return InvoiceHeader(invoice_no="INV-2024-002", buyer_name="LDC GLOBAL", buyer_code="LG")
