# tradedocs/services/totals.py

from typing import Iterable, Sequence

from domain.models import (
    InvoiceHeader,
    InvoiceLine,
    InvoiceTotals,
    PackingListLine,
    PackingListTotals,
)


def _live(lines: Iterable):
    return [line for line in lines or [] if not line.is_deleted]


def packing_list_totals(lines: Sequence[PackingListLine]) -> PackingListTotals:
    """
    Grand totals over every non-deleted packing list line.
    Line totals are recomputed from cartons x per-carton values; nothing
    is rounded here.
    """
    alive = _live(lines)
    return PackingListTotals(
        total_cartons=sum(max(0, int(line.cartons)) for line in alive),
        total_qty=sum(line.qty for line in alive),
        total_nw=sum(line.total_nw for line in alive),
        total_gw=sum(line.total_gw for line in alive),
        total_cbm=sum(line.total_cbm for line in alive),
    )


def invoice_totals(lines: Sequence[InvoiceLine]) -> InvoiceTotals:
    alive = _live(lines)
    return InvoiceTotals(
        total_qty=sum(line.qty for line in alive),
        total_amount=sum(line.amount for line in alive),
    )


def invoice_grand_total(header: InvoiceHeader, lines: Sequence[InvoiceLine]) -> float:
    """
    Amount printed as the invoice total: the stored header total when one
    was entered (> 0), otherwise the sum of the line amounts.
    """
    if header is not None and header.total_amount is not None and header.total_amount > 0:
        return float(header.total_amount)
    return invoice_totals(lines).total_amount
