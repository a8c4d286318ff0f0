# orderledger/services/mirror_mapper.py

"""
Map ledger tab rows to mirror records (chinaorder_googlesheet_all rows).

Synthetic ids use the row's sheet row number, not its position after
blank rows are filtered, so an id keeps pointing at the same ledger row
as long as rows are not inserted or moved above it.
"""

from __future__ import annotations

from typing import Any, Dict, List

from orderledger.sheets.ledger_reader import map_ledger_cells
from orderledger.utils.cells import is_empty_row

MirrorRecord = Dict[str, Any]


def make_mirror_id(business_code: str, tab_code: str, row_number: int) -> str:
    return f"{business_code}-{tab_code}-{row_number}"


def to_mirror_record(
    row_cells: List[Any],
    *,
    owner_id: str,
    business_code: str,
    tab_code: str,
    row_number: int,
) -> MirrorRecord:
    record: MirrorRecord = map_ledger_cells(row_cells)
    record["id"] = make_mirror_id(business_code, tab_code, row_number)
    record["user_id"] = owner_id
    record["sheet_name"] = tab_code
    return record


def transform_tab_rows(
    raw_values: List[List[Any]],
    *,
    owner_id: str,
    business_code: str,
    tab_code: str,
) -> List[MirrorRecord]:
    """Mirror records for every non-blank data row (header row skipped)."""
    records: List[MirrorRecord] = []
    for row_number, row_cells in enumerate(raw_values[1:], start=2):
        if is_empty_row(row_cells):
            continue
        records.append(
            to_mirror_record(
                row_cells,
                owner_id=owner_id,
                business_code=business_code,
                tab_code=tab_code,
                row_number=row_number,
            )
        )
    return records
