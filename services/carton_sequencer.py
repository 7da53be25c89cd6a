# tradedocs/services/carton_sequencer.py

import logging
from dataclasses import replace
from functools import reduce
from typing import Dict, List, Sequence, Tuple

from domain.models import PackingListLine
from utils.sorting import natural_key, nulls_last, upper_text

logger = logging.getLogger(__name__)

FIRST_CARTON_NO = 1

# (next free carton number, {input index: line with its range filled})
_CursorState = Tuple[int, Dict[int, PackingListLine]]


def carton_sort_key(line: PackingListLine):
    """
    PO (natural order) -> C/T from -> C/T to -> style -> description.
    Lines without a carton number go after numbered ones in the same PO.
    """
    return (
        natural_key(line.po_no),
        nulls_last(line.carton_no_from),
        nulls_last(line.carton_no_to),
        upper_text(line.style_no),
        upper_text(line.description),
    )


def _assign_range(state: _CursorState, item: Tuple[int, PackingListLine]) -> _CursorState:
    cursor, placed = state
    idx, line = item

    cartons = max(0, int(line.cartons))
    if cartons == 0:
        return cursor, placed

    start = line.carton_no_from
    end = line.carton_no_to

    if start is None and end is None:
        start, end = cursor, cursor + cartons - 1
    elif end is None:
        end = start + cartons - 1
    elif start is None and end - cartons + 1 >= FIRST_CARTON_NO:
        start = end - cartons + 1
    elif start is None:
        # the typed end leaves no room for the cartons; number from the cursor
        start, end = cursor, cursor + cartons - 1
    # a manually entered range is kept as typed; numbering continues after it

    filled = replace(line, carton_no_from=start, carton_no_to=end)
    return end + 1, {**placed, idx: filled}


def sequence_cartons(lines: Sequence[PackingListLine]) -> List[PackingListLine]:
    """
    Assign C/T No ranges across the whole shipment.

    Numbering runs continuously over every PO (it does not restart per PO).
    Manually entered ranges are kept and numbering continues after them.
    Deleted lines and lines without cartons are returned unchanged.

    Returns a new list in the same order as `lines`; running it again on
    its own output gives the same ranges.
    """
    candidates = sorted(
        ((idx, line) for idx, line in enumerate(lines) if not line.is_deleted),
        key=lambda item: carton_sort_key(item[1]),
    )

    next_no, placed = reduce(_assign_range, candidates, (FIRST_CARTON_NO, {}))

    logger.info(
        "Sequenced %d of %d packing list lines (next C/T No %d)",
        len(placed),
        len(lines),
        next_no,
    )

    return [placed.get(idx, line) for idx, line in enumerate(lines)]


def clear_carton_numbers(lines: Sequence[PackingListLine]) -> List[PackingListLine]:
    """
    Drop every C/T No range on non-deleted lines so the next sequencing
    run numbers them from scratch.
    """
    return [
        line if line.is_deleted else replace(line, carton_no_from=None, carton_no_to=None)
        for line in lines
    ]


def next_carton_no(lines: Sequence[PackingListLine]) -> int:
    """
    First carton number not used by any live line.
    """
    used = [
        line.carton_no_to
        for line in lines
        if not line.is_deleted and line.cartons > 0 and line.carton_no_to is not None
    ]
    return max(used, default=FIRST_CARTON_NO - 1) + 1
