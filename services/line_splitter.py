# tradedocs/services/line_splitter.py

import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from domain.errors import ValidationError
from domain.models import LAST_CARTON_MARKER, LastCartonOverride, PackingListLine
from utils.formatting import is_cbm_input, parse_cbm_input, round_cbm
from utils.normalize import to_number

logger = logging.getLogger(__name__)

LAST_LINE_ID_SUFFIX = "__LAST"


def _find_live_line(lines: Sequence[PackingListLine], line_id: str) -> Tuple[int, PackingListLine]:
    for idx, line in enumerate(lines):
        if line.id == line_id and not line.is_deleted:
            return idx, line
    raise ValidationError(f"Packing list line {line_id!r} not found", line_id=line_id)


def suggest_last_carton_override(line: PackingListLine) -> LastCartonOverride:
    """
    Values the split dialog starts with: one carton's share of the qty
    (rounded down) and the line's current per-carton weights.
    """
    cartons = max(1, int(line.cartons))
    return LastCartonOverride(
        qty=float(max(0, math.floor(line.qty / cartons))),
        nw_per_carton=line.nw_per_carton,
        gw_per_carton=line.gw_per_carton,
        cbm_per_carton=line.cbm_per_carton,
    )


def last_carton_override_from_input(qty, nw, gw, cbm_text: str, line_id: str = "") -> LastCartonOverride:
    """
    Build the override from the split dialog fields. CBM is typed as text
    and must be a number with at most 4 decimals; blank means 0.
    """
    text = (cbm_text or "").strip()
    if not is_cbm_input(text):
        raise ValidationError(f"CBM {text!r} must be a number with at most 4 decimals.", line_id=line_id)
    return LastCartonOverride(
        qty=to_number(qty),
        nw_per_carton=to_number(nw),
        gw_per_carton=to_number(gw),
        cbm_per_carton=parse_cbm_input(text) or 0.0,
    )


def split_last_carton(
        lines: Sequence[PackingListLine],
        line_id: str,
        override: LastCartonOverride,
) -> List[PackingListLine]:
    """
    Split LAST CTN.

    The line is replaced, at the same position, by:
      - the bulk part: same range minus its last carton, same qty and
        per-carton values
      - the last carton: a single carton numbered like the original's last
        one, carrying the qty and per-carton values from `override`

    The bulk qty is left as it was; reducing it is up to the user.

    Raises ValidationError (and changes nothing) unless the line has at
    least 2 cartons and a complete C/T No range matching its carton count.
    """
    idx, base = _find_live_line(lines, line_id)

    cartons = int(base.cartons)
    if cartons < 2:
        raise ValidationError("Cartons must be >= 2 to split LAST CTN.", line_id=line_id)

    start, end = base.carton_no_from, base.carton_no_to
    if start is None or end is None or start < 1 or end - start + 1 != cartons:
        raise ValidationError(
            "Please set C/T No range correctly (Auto C/T No first), then split.",
            line_id=line_id,
        )

    bulk = replace(
        base,
        carton_no_from=start,
        carton_no_to=end - 1,
        cartons=cartons - 1,
    )
    last = replace(
        base,
        id=f"{base.id}{LAST_LINE_ID_SUFFIX}{end}",
        carton_no_from=end,
        carton_no_to=end,
        cartons=1,
        qty=to_number(override.qty),
        nw_per_carton=to_number(override.nw_per_carton),
        gw_per_carton=to_number(override.gw_per_carton),
        cbm_per_carton=round_cbm(to_number(override.cbm_per_carton)),
        description=f"{base.description} {LAST_CARTON_MARKER}".strip(),
    )

    logger.info(
        "Split LAST CTN of line %s: %d-%d + %d",
        line_id,
        bulk.carton_no_from,
        bulk.carton_no_to,
        last.carton_no_from,
    )

    return [*lines[:idx], bulk, last, *lines[idx + 1:]]


def split_off_cartons(
        lines: Sequence[PackingListLine],
        line_id: str,
        split_cartons: int,
        split_qty: float,
        split_gw_per_carton: Optional[float] = None,
        split_nw_per_carton: Optional[float] = None,
        description_suffix: str = "",
) -> List[PackingListLine]:
    """
    Move `split_cartons` cartons and `split_qty` units of a line into a new
    line placed right after it. Unlike Split LAST CTN, the quantity moves:
    the original keeps only what is left.

    The new line takes the next line_no. Both lines lose their C/T No range
    so the next sequencing run numbers them again.
    """
    idx, orig = _find_live_line(lines, line_id)

    split_cartons = int(split_cartons or 0)
    split_qty = to_number(split_qty)

    if split_cartons <= 0:
        raise ValidationError("split_cartons must be > 0", line_id=line_id)
    if split_qty <= 0:
        raise ValidationError("split_qty must be > 0", line_id=line_id)
    if split_cartons >= orig.cartons:
        raise ValidationError("split_cartons must be less than original cartons", line_id=line_id)
    if split_qty >= orig.qty:
        raise ValidationError("split_qty must be less than original qty", line_id=line_id)

    new_line_no = max((ln.line_no or 0 for ln in lines), default=0) + 1
    suffix = (description_suffix or "").strip()

    split = replace(
        orig,
        id=f"{orig.id}__{new_line_no}",
        line_no=new_line_no,
        cartons=split_cartons,
        qty=split_qty,
        carton_no_from=None,
        carton_no_to=None,
        gw_per_carton=orig.gw_per_carton if split_gw_per_carton is None else to_number(split_gw_per_carton),
        nw_per_carton=orig.nw_per_carton if split_nw_per_carton is None else to_number(split_nw_per_carton),
        description=f"{orig.description} {suffix}".strip() if suffix else orig.description,
    )
    remainder = replace(
        orig,
        cartons=orig.cartons - split_cartons,
        qty=orig.qty - split_qty,
        carton_no_from=None,
        carton_no_to=None,
    )

    logger.info(
        "Split %d cartons / %s pcs off line %s as line_no %d",
        split_cartons,
        split_qty,
        line_id,
        new_line_no,
    )

    return [*lines[:idx], remainder, split, *lines[idx + 1:]]
