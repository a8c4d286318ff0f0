# orderledger/sheets/format_normalizer.py

"""Store the date column of freshly written rows as literal text.

The API cannot change a cell's number format and its content in one call,
so this runs as a two-step saga:

    PENDING --(repeatCell TEXT format)--> FORMAT_APPLIED
            --(RAW value rewrite)------> VALUES_WRITTEN

The format must land first; rewriting values into cells that still carry
an automatic number format would turn "0627" back into 627. If the value
rewrite fails after the format was applied, the span's number format is
reset (COMPENSATED) and the original error is re-raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from orderledger.errors import SpreadsheetNotFoundError
from orderledger.sheets.client import INPUT_RAW, SheetsClient
from orderledger.sheets.models import COL_DATE, DATE_COL
from orderledger.utils.a1 import a1_range

logger = logging.getLogger(__name__)


class NormalizeState(str, Enum):
    PENDING = "pending"
    FORMAT_APPLIED = "format_applied"
    VALUES_WRITTEN = "values_written"
    COMPENSATED = "compensated"
    FAILED = "failed"


@dataclass
class NormalizeOutcome:
    range: str
    state: NormalizeState


def _number_format_request(sheet_id: int, start_row: int, end_row: int, number_format: Optional[dict]) -> dict:
    cell_format = {"numberFormat": number_format} if number_format else {}
    return {
        "repeatCell": {
            "range": {
                "sheetId": sheet_id,
                "startRowIndex": start_row - 1,
                "endRowIndex": end_row,
                "startColumnIndex": COL_DATE,
                "endColumnIndex": COL_DATE + 1,
            },
            "cell": {"userEnteredFormat": cell_format},
            "fields": "userEnteredFormat.numberFormat",
        }
    }


def text_format_request(sheet_id: int, start_row: int, end_row: int) -> dict:
    return _number_format_request(sheet_id, start_row, end_row, {"type": "TEXT"})


def reset_format_request(sheet_id: int, start_row: int, end_row: int) -> dict:
    return _number_format_request(sheet_id, start_row, end_row, None)


def normalize_date_column(
    client: SheetsClient,
    spreadsheet_id: str,
    tab_name: str,
    start_row: int,
    end_row: int,
    dates: Sequence[str],
) -> NormalizeOutcome:
    """Format A[start_row..end_row] as text, then rewrite `dates` into it."""
    range_ = a1_range(tab_name, f"{DATE_COL}{start_row}:{DATE_COL}{end_row}")
    state = NormalizeState.PENDING

    sheet_id = client.get_sheet_id(spreadsheet_id, tab_name)
    if sheet_id is None:
        raise SpreadsheetNotFoundError(f"Tab '{tab_name}' not found in spreadsheet")

    client.batch_update(spreadsheet_id, [text_format_request(sheet_id, start_row, end_row)])
    state = NormalizeState.FORMAT_APPLIED
    logger.debug("ledger.normalize.format_applied", extra={"range": range_})

    try:
        client.update_values(
            spreadsheet_id=spreadsheet_id,
            range_=range_,
            values=[[d] for d in dates],
            value_input_option=INPUT_RAW,
        )
    except Exception as e:
        logger.error(
            "ledger.normalize.values_failed",
            extra={"spreadsheet_id": spreadsheet_id, "range": range_, "error": str(e)},
        )
        state = _compensate(client, spreadsheet_id, sheet_id, start_row, end_row, range_)
        logger.error("ledger.normalize.aborted", extra={"range": range_, "state": state.value})
        raise

    state = NormalizeState.VALUES_WRITTEN
    logger.info("ledger.normalize.done", extra={"spreadsheet_id": spreadsheet_id, "range": range_})
    return NormalizeOutcome(range=range_, state=state)


def _compensate(
    client: SheetsClient,
    spreadsheet_id: str,
    sheet_id: int,
    start_row: int,
    end_row: int,
    range_: str,
) -> NormalizeState:
    try:
        client.batch_update(spreadsheet_id, [reset_format_request(sheet_id, start_row, end_row)])
    except Exception as e:
        logger.error(
            "ledger.normalize.compensation_failed",
            extra={"spreadsheet_id": spreadsheet_id, "range": range_, "error": str(e)},
        )
        return NormalizeState.FAILED
    logger.warning("ledger.normalize.compensated", extra={"spreadsheet_id": spreadsheet_id, "range": range_})
    return NormalizeState.COMPENSATED
