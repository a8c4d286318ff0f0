from __future__ import annotations

import re

_PLAIN_TITLE = re.compile(r"^\w+$")


def col_index_to_a1(idx: int) -> str:
    """Convert 1-based column index to A1 letter(s)."""
    if idx <= 0:
        return "A"
    result = ""
    while idx:
        idx, rem = divmod(idx - 1, 26)
        result = chr(65 + rem) + result
    return result


def quote_tab(tab_name: str) -> str:
    """Quote a tab title for A1 notation when it is not a plain word."""
    if _PLAIN_TITLE.match(tab_name):
        return tab_name
    return "'" + tab_name.replace("'", "''") + "'"


def a1_range(tab_name: str, range_spec: str) -> str:
    return f"{quote_tab(tab_name)}!{range_spec}"
