# tradedocs/utils/sorting.py

import math
import re
from typing import Any, Optional, Tuple

_DIGITS_RE = re.compile(r"(\d+)")


def natural_key(value: Optional[str]) -> Tuple[Any, ...]:
    """
    Sort key comparing strings the way people read PO numbers:
    digit runs compare by value, text compares case-insensitively.
    Example: "PO-2" < "PO-10" < "po-11"

    Digit runs sort before text at the same position. The raw chunk is
    kept as the last element so that keys differing only by case still
    order deterministically.
    """
    text = (value or "").strip()
    key = []
    for chunk in _DIGITS_RE.split(text):
        if not chunk:
            continue
        if chunk.isdigit():
            key.append((0, int(chunk), chunk))
        else:
            key.append((1, chunk.casefold(), chunk))
    return tuple(key)


def nulls_last(value: Optional[float]) -> float:
    # missing carton numbers / line numbers go after every real one
    return math.inf if value is None else value


def upper_text(value: Optional[str]) -> str:
    return (value or "").strip().upper()
