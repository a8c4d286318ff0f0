# orderledger/sheets/row_allocator.py

"""Next writable row for an append-only ledger tab.

The allocation is a plain read of the tab's current extent. Nothing is
reserved between this read and the following write, so two writers that
read the same extent will claim the same rows (silent overwrite, duplicate
order numbers). spreadsheet_lock() serializes appends inside one process
only; other processes, other hosts and human editors are not covered. A
durable, atomically incremented row counter would be needed to close the
race entirely.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from orderledger.sheets.client import SheetsClient
from orderledger.sheets.models import NEW_ORDERS_LAST_COL
from orderledger.utils.a1 import a1_range

logger = logging.getLogger(__name__)

HEADER_ROWS = 1

_locks_guard = threading.Lock()
_spreadsheet_locks: Dict[str, threading.Lock] = {}


def allocate_next_row(
    client: SheetsClient,
    spreadsheet_id: str,
    tab_name: str,
    last_col: str = NEW_ORDERS_LAST_COL,
) -> int:
    """Return max(2, row_count + 1) for the tab's A:last_col extent.

    Row 1 is the header. API errors propagate; no retries here.
    """
    values = client.get_values(spreadsheet_id, a1_range(tab_name, f"A:{last_col}"))
    row_count = len(values)
    next_row = max(HEADER_ROWS + 1, row_count + 1)
    logger.debug(
        "ledger.allocate",
        extra={"spreadsheet_id": spreadsheet_id, "tab": tab_name, "row_count": row_count},
    )
    return next_row


@contextmanager
def spreadsheet_lock(spreadsheet_id: str) -> Iterator[None]:
    """Hold a process-local mutex for one spreadsheet."""
    with _locks_guard:
        lock = _spreadsheet_locks.setdefault(spreadsheet_id, threading.Lock())
    with lock:
        yield
