"""Append pipeline for the new-orders tab.

One call runs, in order and synchronously:
    owner lookup -> row allocation -> batch write -> formula
    materialization -> date column normalization

Nothing is rolled back: if a late step fails, rows already written stay
in the ledger and the caller only sees the failure. Submitting the same
batch twice appends it twice; there is no dedup key.
"""
from __future__ import annotations

import logging
import time
from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from orderledger.config import settings
from orderledger.errors import ExternalDependencyError, LedgerError
from orderledger.services.owner_lookup import resolve_spreadsheet_id
from orderledger.sheets.batch_row_writer import validate_order_items, write_batch
from orderledger.sheets.client import SheetsClient, get_sheets_service
from orderledger.sheets.format_normalizer import normalize_date_column
from orderledger.sheets.formula_materializer import RecalcPollPolicy, materialize_formula_columns
from orderledger.sheets.row_allocator import allocate_next_row, spreadsheet_lock

logger = logging.getLogger(__name__)


@dataclass
class AppendResult:
    spreadsheet_id: str
    tab_name: str
    range: str
    next_row: int
    processed_count: int
    failed_count: int
    materialized: bool
    processed_orders: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "googlesheet_id": self.spreadsheet_id,
            "sheet_name": self.tab_name,
            "range": self.range,
            "next_row": self.next_row,
            "processed_count": self.processed_count,
            "failed_count": self.failed_count,
            "materialized": self.materialized,
            "processed_orders": self.processed_orders,
        }


def ledger_today() -> date:
    return datetime.now(ZoneInfo(settings.LEDGER_TIMEZONE)).date()


class LedgerAppendService:
    def __init__(
        self,
        client: SheetsClient,
        *,
        policy: Optional[RecalcPollPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.client = client
        self.policy = policy or RecalcPollPolicy.from_settings(settings)
        self.sleep = sleep
        self.today = today or ledger_today

    def append_batch(self, spreadsheet_id: str, orders: Sequence[Any]) -> AppendResult:
        tabs = settings.LEDGER_TABS
        items, failed_count = validate_order_items(orders)

        guard = spreadsheet_lock(spreadsheet_id) if settings.LEDGER_APPEND_SERIALIZE else nullcontext()
        try:
            with guard:
                next_row = allocate_next_row(self.client, spreadsheet_id, tabs.new)
                written = write_batch(
                    self.client,
                    spreadsheet_id,
                    tabs.new,
                    items,
                    next_row,
                    self.today(),
                    shipped_tab=tabs.shipped,
                    prefix=settings.ORDER_NUMBER_PREFIX,
                )

            materialized = materialize_formula_columns(
                self.client,
                spreadsheet_id,
                tabs.new,
                written.start_row,
                written.end_row,
                self.policy,
                sleep=self.sleep,
            )
            normalize_date_column(
                self.client,
                spreadsheet_id,
                tabs.new,
                written.start_row,
                written.end_row,
                written.dates,
            )
        except LedgerError:
            raise
        except Exception as e:
            logger.exception("ledger.append.failed", extra={"spreadsheet_id": spreadsheet_id})
            raise ExternalDependencyError("Failed to append orders to the ledger.") from e

        return AppendResult(
            spreadsheet_id=spreadsheet_id,
            tab_name=tabs.new,
            range=written.range,
            next_row=next_row,
            processed_count=written.row_count,
            failed_count=failed_count,
            materialized=materialized.materialized,
            processed_orders=written.processed_orders,
        )


def append_batch(
    db: Session,
    owner_id: str,
    orders: Sequence[Any],
    sheets_client: Optional[SheetsClient] = None,
    **service_kwargs: Any,
) -> AppendResult:
    """Resolve the owner's ledger and append `orders` to its new-orders tab."""
    logger.info("ledger.append.start", extra={"owner_id": owner_id, "total": len(orders)})
    spreadsheet_id = resolve_spreadsheet_id(db, owner_id)
    client = sheets_client or SheetsClient(get_sheets_service())
    result = LedgerAppendService(client, **service_kwargs).append_batch(spreadsheet_id, orders)
    logger.info(
        "ledger.append.done",
        extra={
            "owner_id": owner_id,
            "range": result.range,
            "processed": result.processed_count,
            "failed": result.failed_count,
        },
    )
    return result
