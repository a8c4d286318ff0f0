from __future__ import annotations

from typing import Any, Dict, List, Tuple

from orderledger.sheets.client import SheetsClient
from orderledger.sheets.models import (
    FLOAT_FIELDS,
    INT_FIELDS,
    LEDGER_FIELDS,
    LEDGER_LAST_COL,
    NEW_ORDERS_LAST_COL,
    NewOrderRow,
)
from orderledger.utils.a1 import a1_range
from orderledger.utils.cells import is_empty_row, to_float, to_int, to_text

LedgerRow = Dict[str, Any]


def map_ledger_cells(row_cells: List[Any], width: int = len(LEDGER_FIELDS)) -> LedgerRow:
    """Map a positional A.. row into canonical fields.

    Missing trailing cells become "" (text) or None (numeric); numeric
    fields that are blank or not numbers become None, never 0.
    """
    out: LedgerRow = {}
    for idx, field in enumerate(LEDGER_FIELDS[:width]):
        value = row_cells[idx] if idx < len(row_cells) else None
        if field in INT_FIELDS:
            out[field] = to_int(value)
        elif field in FLOAT_FIELDS:
            out[field] = to_float(value)
        else:
            out[field] = to_text(value)
    return out


class LedgerReader:
    """
    Reads ledger tabs as raw rows or as (row_number, row) pairs.

    Assumptions:
    - Row 1 is the header (the new-orders tab keeps the business code in B1)
    - Data rows start at row 2
    - Returns evaluated values (not formulas)
    """

    def __init__(self, client: SheetsClient) -> None:
        self.client = client

    def read_tab(self, spreadsheet_id: str, tab_name: str, last_col: str = LEDGER_LAST_COL) -> List[List[Any]]:
        """All rows of A:last_col including the header; [] for an empty tab."""
        return self.client.get_values(spreadsheet_id, a1_range(tab_name, f"A:{last_col}"))

    def get_new_order_rows(self, spreadsheet_id: str, tab_name: str) -> List[Tuple[int, NewOrderRow]]:
        raw_values = self.read_tab(spreadsheet_id, tab_name, last_col=NEW_ORDERS_LAST_COL)
        if len(raw_values) <= 1:
            return []

        rows: List[Tuple[int, NewOrderRow]] = []
        for row_number, row_cells in enumerate(raw_values[1:], start=2):
            if is_empty_row(row_cells):
                continue
            mapped = map_ledger_cells(row_cells, width=len(NewOrderRow.model_fields))
            rows.append((row_number, NewOrderRow.model_validate(mapped)))
        return rows


def header_cell(raw_values: List[List[Any]], col_idx: int) -> str:
    """Text of a header-row cell, "" when the tab or cell is missing."""
    if not raw_values or not raw_values[0]:
        return ""
    header = raw_values[0]
    return to_text(header[col_idx]) if col_idx < len(header) else ""
