# tradedocs/services/aggregator.py

from collections import OrderedDict
from typing import Callable, Dict, List, Sequence, TypeVar

from domain.models import InvoiceGroup, InvoiceLine, PackingListGroup, PackingListLine
from utils.normalize import normalize_po_no
from utils.sorting import natural_key, nulls_last, upper_text

T = TypeVar("T")


def _bucket_by_po(lines: Sequence[T]) -> Dict[str, List[T]]:
    buckets: Dict[str, List[T]] = OrderedDict()
    for line in lines or []:
        if line.is_deleted:
            continue
        buckets.setdefault(normalize_po_no(line.po_no), []).append(line)
    return buckets


def _ordered_buckets(lines: Sequence[T], line_key: Callable[[T], tuple]):
    buckets = _bucket_by_po(lines)
    for po_no in sorted(buckets, key=natural_key):
        yield po_no, sorted(buckets[po_no], key=line_key)


def packing_line_key(line: PackingListLine):
    # inside one PO: C/T from -> C/T to -> style -> description
    return (
        nulls_last(line.carton_no_from),
        nulls_last(line.carton_no_to),
        upper_text(line.style_no),
        upper_text(line.description),
    )


def invoice_line_key(line: InvoiceLine):
    # inside one PO: style -> line_no -> id
    return (
        (line.style_no or "").strip(),
        nulls_last(line.line_no),
        str(line.id or ""),
    )


def group_packing_lines(lines: Sequence[PackingListLine]) -> List[PackingListGroup]:
    """
    Group live packing list lines by PO number.

    Groups come out in natural PO order; blank PO numbers share the "-"
    group. Subtotals are plain sums of the recomputed line totals.
    """
    groups: List[PackingListGroup] = []
    for po_no, members in _ordered_buckets(lines, packing_line_key):
        groups.append(
            PackingListGroup(
                po_no=po_no,
                lines=members,
                subtotal_cartons=sum(max(0, int(ln.cartons)) for ln in members),
                subtotal_qty=sum(ln.qty for ln in members),
                subtotal_nw=sum(ln.total_nw for ln in members),
                subtotal_gw=sum(ln.total_gw for ln in members),
                subtotal_cbm=sum(ln.total_cbm for ln in members),
            )
        )
    return groups


def group_invoice_lines(lines: Sequence[InvoiceLine]) -> List[InvoiceGroup]:
    """
    Group live invoice lines by PO number, with per-PO qty and amount.
    """
    return [
        InvoiceGroup(
            po_no=po_no,
            lines=members,
            subtotal_qty=sum(ln.qty for ln in members),
            subtotal_amount=sum(ln.amount for ln in members),
        )
        for po_no, members in _ordered_buckets(lines, invoice_line_key)
    ]
