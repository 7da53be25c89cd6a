# tradedocs/utils/formatting.py

import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional, Tuple

from domain.models import LAST_CARTON_MARKER

CBM_DECIMALS = 4
_CBM_QUANT = Decimal(1).scaleb(-CBM_DECIMALS)  # 0.0001
_QTY_QUANT = Decimal("0.01")
_WEIGHT_QUANT = Decimal("0.1")

# empty, integer, or decimal with at most 4 places (intermediate "1." allowed)
_CBM_INPUT_RE = re.compile(r"^(\d+(\.\d{0,4})?)?$")
_LAST_CARTON_RE = re.compile(r"\s*" + re.escape(LAST_CARTON_MARKER) + r"\s*", re.IGNORECASE)


def _as_float(v: Any) -> float:
    if v is None or v == "":
        return 0.0
    try:
        x = float(v)
    except (TypeError, ValueError):
        return 0.0
    return x if math.isfinite(x) else 0.0


def _half_up(x: float, quant: Decimal) -> Decimal:
    return Decimal(str(x)).quantize(quant, rounding=ROUND_HALF_UP)


def _strip_zeros(text: str) -> str:
    if "." not in text:
        return text
    return text.rstrip("0").rstrip(".")


def format_money(v: Any) -> str:
    """
    Monetary amount with 2 decimals and thousands separators.
    Example: 1234.5 -> "1,234.50"
    """
    return f"{_half_up(_as_float(v), _QTY_QUANT):,.2f}"


def format_qty(v: Any) -> str:
    """
    Quantity without decimals when integral, otherwise up to 2 decimals.
    Example: 1200 -> "1,200", 12.5 -> "12.5"
    """
    x = _as_float(v)
    if abs(x - round(x)) < 1e-9:
        return f"{int(round(x)):,}"
    return _strip_zeros(f"{_half_up(x, _QTY_QUANT):,.2f}")


def format_weight(v: Any) -> str:
    """NW/GW with exactly one decimal."""
    return f"{_half_up(_as_float(v), _WEIGHT_QUANT):,.1f}"


def format_decimal(v: Any, digits: int) -> str:
    return f"{_as_float(v):,.{digits}f}"


def round_cbm(v: Any) -> float:
    """
    Round a volume to 4 decimals, half away from zero.
    """
    rounded = float(_half_up(_as_float(v), _CBM_QUANT))
    return 0.0 if rounded == 0 else rounded


def format_cbm(v: Any) -> str:
    """
    Volume with up to 4 decimals and no trailing zeros.
    Example: 1.2300 -> "1.23", 1.2 -> "1.2", 2 -> "2"
    """
    return _strip_zeros(f"{round_cbm(v):.{CBM_DECIMALS}f}")


def is_cbm_input(text: str) -> bool:
    """
    True when `text` is an acceptable (possibly partial) CBM entry.
    """
    return bool(_CBM_INPUT_RE.match((text or "").strip()))


def parse_cbm_input(text: Optional[str]) -> Optional[float]:
    """
    Turn a CBM entry into the value stored on the line.
    Blank or unacceptable entries give None; accepted entries are
    rounded to 4 decimals.
    """
    s = (text or "").strip()
    if s in ("", ".") or not is_cbm_input(s):
        return None
    return round_cbm(s)


def format_carton_range(carton_from: Any, carton_to: Any) -> str:
    """
    C/T No column text.
    Example: (3, 5) -> "3-5", (6, 6) -> "6", (None, None) -> ""
    """
    f = "" if carton_from is None else str(carton_from).strip()
    t = "" if carton_to is None else str(carton_to).strip()
    if not f and not t:
        return ""
    if not t:
        return f
    if not f:
        return t
    if f == t:
        return f
    return f"{f}-{t}"


def origin_to_coo_text(origin: Optional[str]) -> str:
    """
    Country of origin line for the document header.
    Example: "VN_HCM" -> "MADE IN VIETNAM"
    """
    o = (origin or "").strip().upper()
    if not o:
        return ""
    if o.startswith("MADE IN"):
        return o
    if o.startswith("VN_") or "VIET" in o:
        return "MADE IN VIETNAM"
    if o.startswith("CN_") or "CHINA" in o or "QINGDAO" in o:
        return "MADE IN CHINA"
    if o.startswith("KR_") or "KOREA" in o or "SEOUL" in o:
        return "MADE IN KOREA"
    return f"MADE IN {o.replace('_', ' ')}"


def split_last_carton_marker(description: Optional[str]) -> Tuple[str, bool]:
    """
    Remove the LAST CTN marker from a description.
    Returns (clean_description, was_marked).
    """
    desc = (description or "").strip()
    if LAST_CARTON_MARKER.upper() not in desc.upper():
        return desc, False
    return _LAST_CARTON_RE.sub(" ", desc).strip(), True
