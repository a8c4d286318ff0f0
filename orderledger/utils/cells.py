from __future__ import annotations

import math
import re
from typing import Any, Iterable, Optional, Union

# Plain numeric string, optionally prefixed with the apostrophe Sheets uses to force text
_NUMERIC_CELL = re.compile(r"^(')?([-+]?\d+(?:\.\d+)?)$")


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def is_empty_row(row_cells: Iterable[Any]) -> bool:
    """A row is empty if all cells are None or blank strings."""
    return all(is_blank(cell) for cell in row_cells)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def to_float(value: Any) -> Optional[float]:
    """Convert a cell value to float if possible, otherwise return None.

    Handles None, empty strings, numeric types, and ignores invalid text.
    NaN and infinities ("NaN", "inf", "1e999") count as invalid.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        s = value
    else:
        s = str(value).strip().replace(",", "")
        if s == "":
            return None
    try:
        f = float(s)
    except (ValueError, OverflowError):
        return None
    return f if math.isfinite(f) else None


def to_int(value: Any) -> Optional[int]:
    """Integer view of a cell; fractional input is truncated, junk becomes None."""
    f = to_float(value)
    if f is None:
        return None
    return int(f)


def coerce_numeric_cell(value: Any) -> Union[int, float, Any]:
    """Turn "'123" / "123" / "12.5" into numbers; leave anything else untouched."""
    if not isinstance(value, str):
        return value
    m = _NUMERIC_CELL.match(value.strip())
    if not m:
        return value
    number = m.group(2)
    if "." in number:
        return float(number)
    return int(number)
