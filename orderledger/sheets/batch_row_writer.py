# orderledger/sheets/batch_row_writer.py
"""
Writer for batches of order items appended to the new-orders tab.

Each valid item becomes one 20-column row (A..T):
- A: order date as MMDD
- B: order number PREFIX-YYMMDD-NNNN, NNNN being the sheet row number
- C..F: item name, option name, quantity, barcode
- G..L: lookup formulas into the shipped tab keyed by barcode (F)
- M..S: reserved, left blank
- T: option id

The whole batch is written with one USER_ENTERED call so the formulas
evaluate. Values in A are coerced to numbers by that call; the format
normalizer rewrites them as text afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Sequence, Tuple

from pydantic import ValidationError

from orderledger.errors import NoValidRowsError
from orderledger.sheets.client import INPUT_USER_ENTERED, SheetsClient
from orderledger.sheets.models import (
    COL_BARCODE,
    LOOKUP_COLUMNS,
    NEW_ORDERS_LAST_COL,
    OrderItem,
)
from orderledger.utils.a1 import a1_range, col_index_to_a1, quote_tab

logger = logging.getLogger(__name__)

_RESERVED_BLANK_COLUMNS = 7  # M..S


@dataclass
class BatchWriteResult:
    range: str
    start_row: int
    end_row: int
    dates: List[str] = field(default_factory=list)
    processed_orders: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return self.end_row - self.start_row + 1


def validate_order_items(raw_items: Sequence[Any]) -> Tuple[List[OrderItem], int]:
    """Keep the items that pass validation, in order; count the rest.

    Raises NoValidRowsError when nothing survives.
    """
    valid: List[OrderItem] = []
    failed = 0
    for idx, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            failed += 1
            logger.warning("ledger.append.item_invalid", extra={"index": idx, "error": "not an object"})
            continue
        try:
            valid.append(OrderItem.model_validate(raw))
        except ValidationError as e:
            failed += 1
            logger.warning(
                "ledger.append.item_invalid",
                extra={"index": idx, "error": "; ".join(str(err.get("loc")) for err in e.errors())},
            )
    if not valid:
        raise NoValidRowsError(failed_count=failed)
    return valid, failed


def format_order_date(today: date) -> str:
    return today.strftime("%m%d")


def format_order_number(prefix: str, today: date, row_number: int) -> str:
    """PREFIX-YYMMDD-NNNN with the sheet row zero-padded to four digits.

    Rows past 9999 widen the suffix (row 12345 gives "-12345") rather than
    wrapping, so order numbers stay unique per tab and date.
    """
    return f"{prefix}-{today.strftime('%y%m%d')}-{row_number:04d}"


def lookup_formula(row_number: int, column: str, shipped_tab: str) -> str:
    """Latest match in the shipped tab for this row's barcode, "" when none."""
    key_col = col_index_to_a1(COL_BARCODE + 1)
    key = f"${key_col}{row_number}"
    src = quote_tab(shipped_tab)
    return (
        f'=IF({key}="","",XLOOKUP({key},{src}!${key_col}:${key_col},'
        f'{src}!{column}:{column},"",0,-1))'
    )


def build_ledger_row(
    item: OrderItem,
    row_number: int,
    today: date,
    shipped_tab: str,
    prefix: str,
) -> List[Any]:
    row: List[Any] = [
        format_order_date(today),
        format_order_number(prefix, today, row_number),
        item.item_name,
        item.option_name,
        item.quantity,
        item.barcode or "",
    ]
    row.extend(lookup_formula(row_number, col, shipped_tab) for col in LOOKUP_COLUMNS)
    row.extend([""] * _RESERVED_BLANK_COLUMNS)
    row.append(item.option_id)
    return row


def write_batch(
    client: SheetsClient,
    spreadsheet_id: str,
    tab_name: str,
    items: Sequence[OrderItem],
    start_row: int,
    today: date,
    *,
    shipped_tab: str,
    prefix: str,
) -> BatchWriteResult:
    """Write all items as one contiguous block starting at start_row."""
    if not items:
        raise NoValidRowsError(failed_count=0)

    values: List[List[Any]] = []
    processed: List[Dict[str, Any]] = []
    for offset, item in enumerate(items):
        row_number = start_row + offset
        row = build_ledger_row(item, row_number, today, shipped_tab, prefix)
        values.append(row)
        processed.append(
            {
                "row_number": row_number,
                "order_number": row[1],
                "item_name": item.item_name,
                "option_name": item.option_name,
                "quantity": item.quantity,
                "option_id": item.option_id,
            }
        )

    end_row = start_row + len(values) - 1
    range_ = a1_range(tab_name, f"A{start_row}:{NEW_ORDERS_LAST_COL}{end_row}")
    client.update_values(
        spreadsheet_id=spreadsheet_id,
        range_=range_,
        values=values,
        value_input_option=INPUT_USER_ENTERED,
    )
    logger.info(
        "ledger.append.rows_written",
        extra={"spreadsheet_id": spreadsheet_id, "range": range_, "count": len(values)},
    )
    return BatchWriteResult(
        range=range_,
        start_row=start_row,
        end_row=end_row,
        dates=[row[0] for row in values],
        processed_orders=processed,
    )
