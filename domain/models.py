# tradedocs/domain/models.py

from dataclasses import dataclass, field
from typing import List, Optional

# Grouping bucket for lines without a PO number
BLANK_PO = "-"

# Appended to the description of the line split off by "Split LAST CTN"
LAST_CARTON_MARKER = "(LAST CTN)"


@dataclass
class PackingListLine:
    """
    Represents one line of a packing list, after ingress normalization.
    Totals are never stored; they are derived from the per-carton values.
    """
    id: str
    po_no: str = ""
    style_no: str = ""
    description: str = ""
    cartons: int = 0
    carton_no_from: Optional[int] = None
    carton_no_to: Optional[int] = None
    qty: float = 0.0
    nw_per_carton: float = 0.0
    gw_per_carton: float = 0.0
    cbm_per_carton: float = 0.0
    line_no: Optional[int] = None
    is_deleted: bool = False

    @property
    def total_nw(self) -> float:
        return self.cartons * self.nw_per_carton

    @property
    def total_gw(self) -> float:
        return self.cartons * self.gw_per_carton

    @property
    def total_cbm(self) -> float:
        return self.cartons * self.cbm_per_carton

    @property
    def has_carton_range(self) -> bool:
        return self.carton_no_from is not None and self.carton_no_to is not None


@dataclass
class InvoiceLine:
    """
    Represents one line item of a commercial invoice.
    """
    id: str
    po_no: str = ""
    style_no: str = ""
    line_no: Optional[int] = None
    description: str = ""
    material_content: str = ""
    hs_code: str = ""
    qty: float = 0.0
    unit_price: float = 0.0
    is_deleted: bool = False

    @property
    def amount(self) -> float:
        return self.qty * self.unit_price


@dataclass
class InvoiceHeader:
    """
    Identity fields of an invoice, plus the optional Material/HS display
    overrides set per invoice.
    """
    invoice_no: str = ""
    buyer_name: str = ""
    buyer_code: str = ""
    currency: str = "USD"
    total_amount: Optional[float] = None
    shipping_origin_code: str = ""
    show_material_hs: Optional[bool] = None
    pdf_show_material: str = "AUTO"  # "AUTO" | "ON" | "OFF"
    pdf_show_hs_code: str = "AUTO"


@dataclass
class LastCartonOverride:
    """
    Values typed into the split dialog for the distinguished last carton.
    """
    qty: float
    nw_per_carton: float
    gw_per_carton: float
    cbm_per_carton: float


@dataclass
class PackingListGroup:
    po_no: str  # blank PO numbers are grouped under "-"
    lines: List[PackingListLine] = field(default_factory=list)
    subtotal_cartons: int = 0
    subtotal_qty: float = 0.0
    subtotal_nw: float = 0.0
    subtotal_gw: float = 0.0
    subtotal_cbm: float = 0.0


@dataclass
class InvoiceGroup:
    po_no: str
    lines: List[InvoiceLine] = field(default_factory=list)
    subtotal_qty: float = 0.0
    subtotal_amount: float = 0.0


@dataclass
class PackingListTotals:
    total_cartons: int = 0
    total_qty: float = 0.0
    total_nw: float = 0.0
    total_gw: float = 0.0
    total_cbm: float = 0.0


@dataclass
class InvoiceTotals:
    total_qty: float = 0.0
    total_amount: float = 0.0


@dataclass
class MaterialHsColumns:
    show_material: bool
    show_hs_code: bool

    @property
    def any_shown(self) -> bool:
        return self.show_material or self.show_hs_code


@dataclass
class PackingListDocument:
    """
    A packing list ready to hand to a renderer.
    """
    lines: List[PackingListLine]  # flat collection, input order, for saving
    groups: List[PackingListGroup]
    totals: PackingListTotals


@dataclass
class InvoiceDocument:
    """
    A commercial invoice ready to hand to a renderer.
    """
    header: InvoiceHeader
    lines: List[InvoiceLine]
    groups: List[InvoiceGroup]
    totals: InvoiceTotals
    columns: List[str]  # table schema, Material/HS only when the policy allows
    grand_total: float
