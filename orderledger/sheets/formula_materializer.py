# orderledger/sheets/formula_materializer.py

"""Replace live lookup formulas with their computed values.

The Sheets API gives no signal when recalculation finishes, so the range
is polled with FORMATTED_VALUE until consecutive reads agree (or the
attempt budget runs out) and then rewritten with RAW, which drops the
formulas. If every read comes back empty the rows keep their live
formulas; the caller sees materialized=False.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from orderledger.config import Settings
from orderledger.sheets.client import INPUT_RAW, RENDER_FORMATTED, SheetsClient
from orderledger.sheets.models import (
    LOOKUP_COLUMNS,
    LOOKUP_FIRST_COL,
    LOOKUP_LAST_COL,
    NUMERIC_LOOKUP_COLUMNS,
)
from orderledger.utils.a1 import a1_range
from orderledger.utils.cells import coerce_numeric_cell

logger = logging.getLogger(__name__)

# Placeholder Sheets renders while a formula is still computing
PENDING_MARKERS = ("Loading...",)

_NUMERIC_OFFSETS = [LOOKUP_COLUMNS.index(c) for c in NUMERIC_LOOKUP_COLUMNS]


@dataclass(frozen=True)
class RecalcPollPolicy:
    initial_delay: float = 1.0
    interval: float = 0.5
    backoff: float = 2.0
    max_attempts: int = 5
    stable_reads: int = 2

    @classmethod
    def from_settings(cls, s: Settings) -> "RecalcPollPolicy":
        return cls(
            initial_delay=s.RECALC_INITIAL_DELAY_SECONDS,
            interval=s.RECALC_POLL_INTERVAL_SECONDS,
            backoff=s.RECALC_POLL_BACKOFF,
            max_attempts=s.RECALC_MAX_ATTEMPTS,
            stable_reads=s.RECALC_STABLE_READS,
        )


@dataclass
class MaterializeOutcome:
    range: str
    materialized: bool
    attempts: int
    rows_converted: int = 0


def _is_pending(values: List[List[Any]]) -> bool:
    return any(cell in PENDING_MARKERS for row in values for cell in row)


def convert_numeric_columns(values: List[List[Any]]) -> List[List[Any]]:
    """Coerce the numeric lookup columns; other cells pass through as read."""
    converted: List[List[Any]] = []
    for row in values:
        new_row = list(row)
        for offset in _NUMERIC_OFFSETS:
            if offset < len(new_row):
                new_row[offset] = coerce_numeric_cell(new_row[offset])
        converted.append(new_row)
    return converted


def wait_for_computed_values(
    client: SheetsClient,
    spreadsheet_id: str,
    range_: str,
    policy: RecalcPollPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[List[List[Any]], int]:
    """Poll until `stable_reads` consecutive identical, non-pending reads.

    Returns (values, attempts). On budget exhaustion the last non-empty,
    non-pending read is returned, else [].
    """
    if policy.initial_delay > 0:
        sleep(policy.initial_delay)

    delay = policy.interval
    last: Optional[List[List[Any]]] = None
    streak = 0
    attempt = 0
    for attempt in range(1, policy.max_attempts + 1):
        values = client.get_values(spreadsheet_id, range_, value_render_option=RENDER_FORMATTED)
        ready = bool(values) and not _is_pending(values)
        if ready and values == last:
            streak += 1
        elif ready:
            streak = 1
        else:
            streak = 0
        last = values
        logger.debug(
            "ledger.materialize.poll",
            extra={"range": range_, "attempt": attempt, "row_count": len(values)},
        )
        if streak >= policy.stable_reads:
            return values, attempt
        if attempt < policy.max_attempts:
            sleep(delay)
            delay *= policy.backoff

    if last and not _is_pending(last):
        logger.warning(
            "ledger.materialize.unstable",
            extra={"range": range_, "attempt": attempt},
        )
        return last, attempt
    return [], attempt


def materialize_formula_columns(
    client: SheetsClient,
    spreadsheet_id: str,
    tab_name: str,
    start_row: int,
    end_row: int,
    policy: RecalcPollPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> MaterializeOutcome:
    range_ = a1_range(tab_name, f"{LOOKUP_FIRST_COL}{start_row}:{LOOKUP_LAST_COL}{end_row}")
    values, attempts = wait_for_computed_values(client, spreadsheet_id, range_, policy, sleep=sleep)

    if not values:
        logger.warning(
            "ledger.materialize.skipped",
            extra={"spreadsheet_id": spreadsheet_id, "range": range_, "attempt": attempts},
        )
        return MaterializeOutcome(range=range_, materialized=False, attempts=attempts)

    # Sheets omits trailing empty cells and rows; pad so RAW overwrites every formula
    width = len(LOOKUP_COLUMNS)
    height = end_row - start_row + 1
    padded = [list(r) + [""] * (width - len(r)) for r in values[:height]]
    padded.extend([[""] * width for _ in range(height - len(padded))])

    client.update_values(
        spreadsheet_id=spreadsheet_id,
        range_=range_,
        values=convert_numeric_columns(padded),
        value_input_option=INPUT_RAW,
    )
    logger.info(
        "ledger.materialize.done",
        extra={"spreadsheet_id": spreadsheet_id, "range": range_, "count": len(padded), "attempt": attempts},
    )
    return MaterializeOutcome(range=range_, materialized=True, attempts=attempts, rows_converted=len(padded))
