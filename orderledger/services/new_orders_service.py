from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError
from sqlalchemy.orm import Session

from orderledger.config import settings
from orderledger.errors import InvalidInputError
from orderledger.services.owner_lookup import resolve_spreadsheet_id
from orderledger.sheets.client import INPUT_USER_ENTERED, SheetsClient, get_sheets_service
from orderledger.sheets.ledger_reader import LedgerReader
from orderledger.sheets.models import NEW_ORDERS_LAST_COL, NewOrderRow
from orderledger.utils.a1 import a1_range

logger = logging.getLogger(__name__)


def read_new_orders(
    db: Session,
    owner_id: str,
    sheets_client: Optional[SheetsClient] = None,
) -> List[Dict[str, Any]]:
    """Current data rows of the new-orders tab, header excluded."""
    spreadsheet_id = resolve_spreadsheet_id(db, owner_id)
    client = sheets_client or SheetsClient(get_sheets_service())
    rows = LedgerReader(client).get_new_order_rows(spreadsheet_id, settings.LEDGER_TABS.new)
    logger.info("new_orders.read", extra={"owner_id": owner_id, "count": len(rows)})
    return [{"row_number": n, **row.model_dump()} for n, row in rows]


def replace_new_orders(
    db: Session,
    owner_id: str,
    orders: Sequence[Dict[str, Any]],
    sheets_client: Optional[SheetsClient] = None,
) -> int:
    """Overwrite every data row of the new-orders tab with `orders`.

    The header row is kept. Existing rows are cleared first, then the new
    rows are written from row 2. Returns the number of rows written.
    """
    try:
        rows = [NewOrderRow.model_validate(o) for o in orders]
    except ValidationError as e:
        raise InvalidInputError(f"Invalid new-order row: {e.errors()[0].get('msg')}") from e

    spreadsheet_id = resolve_spreadsheet_id(db, owner_id)
    client = sheets_client or SheetsClient(get_sheets_service())
    tab = settings.LEDGER_TABS.new

    existing = LedgerReader(client).read_tab(spreadsheet_id, tab, last_col=NEW_ORDERS_LAST_COL)
    if len(existing) > 1:
        clear_range = a1_range(tab, f"A2:{NEW_ORDERS_LAST_COL}{len(existing)}")
        client.clear_values(spreadsheet_id, clear_range)
        logger.info("new_orders.cleared", extra={"owner_id": owner_id, "range": clear_range})

    if rows:
        update_range = a1_range(tab, f"A2:{NEW_ORDERS_LAST_COL}{1 + len(rows)}")
        client.update_values(
            spreadsheet_id=spreadsheet_id,
            range_=update_range,
            values=[r.to_sheet_row() for r in rows],
            value_input_option=INPUT_USER_ENTERED,
        )
        logger.info("new_orders.saved", extra={"owner_id": owner_id, "range": update_range, "count": len(rows)})
    return len(rows)
