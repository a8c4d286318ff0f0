# orderledger/jobs/reconcile_job.py

from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from orderledger.config import settings
from orderledger.errors import ExternalDependencyError
from orderledger.services.mirror_mapper import transform_tab_rows
from orderledger.services.mirror_repository import MirrorRepository
from orderledger.services.owner_lookup import resolve_spreadsheet_id
from orderledger.sheets.client import SheetsClient, get_sheets_service
from orderledger.sheets.ledger_reader import LedgerReader, header_cell
from orderledger.sheets.models import TAB_CODE_NEW, ledger_tabs_in_order

logger = logging.getLogger(__name__)

# Header cell of the new-orders tab holding the owner's business code (B1)
BUSINESS_CODE_COL = 1

TAB_INSERTED = "inserted"
TAB_SKIPPED = "skipped"
TAB_FAILED = "failed"


@dataclass
class TabOutcome:
    tab_name: str
    tab_code: str
    status: str
    rows_written: int = 0
    error: Optional[str] = None


@dataclass
class ReconcileResult:
    owner_id: str
    spreadsheet_id: str
    business_code: str
    total_count: int = 0
    deleted_count: int = 0
    tabs: List[TabOutcome] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def run_reconcile_all(
    db: Session,
    owner_id: str,
    sheets_client: Optional[SheetsClient] = None,
    batch_size: Optional[int] = None,
) -> ReconcileResult:
    """Rebuild the owner's mirror from every ledger tab.

    Flow:
      1. delete the owner's whole mirror set (failure aborts the run)
      2. per tab, in order: READ_TAB -> (<=1 row: SKIP) -> business code
         (new tab only) -> TRANSFORM_ROWS -> BATCH_INSERT
      3. a read/transform failure on one tab is recorded and the run
         moves on; an insert failure aborts the run with no rollback of
         tabs already inserted
    """
    started = time.monotonic()
    spreadsheet_id = resolve_spreadsheet_id(db, owner_id)
    client = sheets_client or SheetsClient(get_sheets_service())
    reader = LedgerReader(client)
    repo = MirrorRepository(db, batch_size=batch_size)

    result = ReconcileResult(
        owner_id=owner_id,
        spreadsheet_id=spreadsheet_id,
        business_code=settings.DEFAULT_BUSINESS_CODE,
    )
    logger.info("reconcile.start", extra={"owner_id": owner_id, "spreadsheet_id": spreadsheet_id})

    try:
        result.deleted_count = repo.delete_for_owner(owner_id)
    except Exception as e:
        logger.exception("reconcile.delete_failed", extra={"owner_id": owner_id})
        raise ExternalDependencyError(
            "Failed to clear mirror records before reconciliation.",
            data=result.to_dict(),
        ) from e

    for tab_name, tab_code in ledger_tabs_in_order(settings.LEDGER_TABS):
        try:
            raw_values = reader.read_tab(spreadsheet_id, tab_name)
        except Exception as e:
            logger.error(
                "reconcile.tab.read_failed",
                extra={"owner_id": owner_id, "tab": tab_name, "error": str(e)},
            )
            result.tabs.append(TabOutcome(tab_name, tab_code, TAB_FAILED, error=str(e)))
            continue

        if len(raw_values) <= 1:
            logger.info("reconcile.tab.skip", extra={"tab": tab_name, "row_count": len(raw_values)})
            result.tabs.append(TabOutcome(tab_name, tab_code, TAB_SKIPPED))
            continue

        if tab_code == TAB_CODE_NEW:
            code = header_cell(raw_values, BUSINESS_CODE_COL)
            if code:
                result.business_code = code

        try:
            records = transform_tab_rows(
                raw_values,
                owner_id=owner_id,
                business_code=result.business_code,
                tab_code=tab_code,
            )
        except Exception as e:
            logger.error(
                "reconcile.tab.transform_failed",
                extra={"owner_id": owner_id, "tab": tab_name, "error": str(e)},
            )
            result.tabs.append(TabOutcome(tab_name, tab_code, TAB_FAILED, error=str(e)))
            continue

        if not records:
            result.tabs.append(TabOutcome(tab_name, tab_code, TAB_SKIPPED))
            continue

        try:
            written = repo.insert_records(records)
        except Exception as e:
            logger.exception(
                "reconcile.tab.insert_failed",
                extra={"owner_id": owner_id, "tab": tab_name, "total": result.total_count},
            )
            result.tabs.append(TabOutcome(tab_name, tab_code, TAB_FAILED, error=str(e)))
            raise ExternalDependencyError(
                f"Failed to insert mirror records for tab '{tab_name}'.",
                data=result.to_dict(),
            ) from e

        result.total_count += written
        result.tabs.append(TabOutcome(tab_name, tab_code, TAB_INSERTED, rows_written=written))
        logger.info(
            "reconcile.tab.done",
            extra={"tab": tab_name, "tab_code": tab_code, "count": written, "business_code": result.business_code},
        )

    logger.info(
        "reconcile.done",
        extra={
            "owner_id": owner_id,
            "total": result.total_count,
            "business_code": result.business_code,
            "elapsed_ms": int((time.monotonic() - started) * 1000),
        },
    )
    return result
