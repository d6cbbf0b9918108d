from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import numpy as np
import pandas as pd


WAN = 10000
WAN_SUFFIX = "万"

_BLANK_TOKENS = {"", "undefined"}
_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, str):
        return value.strip().lower() in _BLANK_TOKENS
    return False


def cell_text(value: object) -> str:
    """Render a raw cell as trimmed text; blanks become ""."""
    if is_blank(value):
        return ""
    if isinstance(value, (bool, np.bool_)):
        return str(bool(value)).lower()
    if isinstance(value, (float, np.floating)):
        f = float(value)
        if math.isfinite(f) and f.is_integer():
            return str(int(f))
        return repr(f)
    if isinstance(value, (datetime, pd.Timestamp)):
        if value.hour == 0 and value.minute == 0 and value.second == 0:
            return value.strftime("%Y-%m-%d")
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _to_float(value: object) -> Optional[float]:
    if is_blank(value) or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        out = float(value)
        return out if math.isfinite(out) else None
    text = str(value).strip().replace(",", "")
    match = _LEADING_FLOAT.match(text)
    if not match:
        return None
    out = float(match.group(0))
    return out if math.isfinite(out) else None


def normalize_number(value: object, default: Optional[float] = 0.0) -> Optional[float]:
    """Parse a raw cell into a float.

    Thousands separators are stripped and trailing suffixes such as ``%`` or
    ``万`` are ignored (only the leading numeric part is read). Blank and
    unparseable input yields ``default`` instead of raising.
    """
    out = _to_float(value)
    return default if out is None else out


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def normalize_to_unit(
    value: object,
    divisor: float = WAN,
    decimals: int = 2,
    default: Optional[float] = 0.0,
) -> Optional[float]:
    """Convert a raw cell to the dashboard unit (ten-thousands by default)."""
    out = _to_float(value)
    if out is None:
        return default
    return round_half_up(out / divisor, decimals)


def format_grouped(value: float) -> str:
    """Grouped thousands with at most three fraction digits, e.g. ``1,234.5``."""
    text = f"{round_half_up(float(value), 3):,.3f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in {"-0", ""}:
        text = "0"
    return text


def format_wan(value: float, decimals: int = 2) -> str:
    """Format a raw count as ten-thousands with the unit suffix, e.g. ``123.46万``."""
    converted = round_half_up(float(value) / WAN, decimals)
    return f"{converted:.{decimals}f}{WAN_SUFFIX}"
