# orderledger/api/routes/ledger.py

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from orderledger.api.deps import get_db, get_sheets_client, require_shared_secret
from orderledger.api.errors import ok
from orderledger.api.schemas.ledger import (
    AppendBatchRequest,
    LedgerResponse,
    OwnerRequest,
    ReplaceNewOrdersRequest,
)
from orderledger.jobs.reconcile_job import run_reconcile_all
from orderledger.services.ledger_append_service import append_batch
from orderledger.services.new_orders_service import read_new_orders, replace_new_orders
from orderledger.sheets.client import SheetsClient


router = APIRouter(prefix="/ledger", tags=["ledger"], dependencies=[Depends(require_shared_secret)])


@router.post("/orders/batch", response_model=LedgerResponse)
def append_orders(
    req: AppendBatchRequest,
    request: Request,
    db: Session = Depends(get_db),
    client: SheetsClient = Depends(get_sheets_client),
) -> LedgerResponse:
    """
    Append a batch of order items to the owner's new-orders tab.
    """
    result = append_batch(db, req.owner_id, req.orders, sheets_client=client)
    return ok(
        request,
        f"{result.processed_count} orders appended.",
        data=result.to_dict(),
    )


@router.post("/reconcile", response_model=LedgerResponse)
def reconcile(
    req: OwnerRequest,
    request: Request,
    db: Session = Depends(get_db),
    client: SheetsClient = Depends(get_sheets_client),
) -> LedgerResponse:
    """
    Rebuild the owner's mirror table from all ledger tabs.
    """
    result = run_reconcile_all(db, req.owner_id, sheets_client=client)
    return ok(request, f"{result.total_count} ledger rows mirrored.", data=result.to_dict())


@router.post("/new-orders/read", response_model=LedgerResponse)
def read_new(
    req: OwnerRequest,
    request: Request,
    db: Session = Depends(get_db),
    client: SheetsClient = Depends(get_sheets_client),
) -> LedgerResponse:
    rows = read_new_orders(db, req.owner_id, sheets_client=client)
    return ok(request, f"{len(rows)} rows read.", data=rows)


@router.post("/new-orders/replace", response_model=LedgerResponse)
def replace_new(
    req: ReplaceNewOrdersRequest,
    request: Request,
    db: Session = Depends(get_db),
    client: SheetsClient = Depends(get_sheets_client),
) -> LedgerResponse:
    saved = replace_new_orders(db, req.owner_id, req.orders, sheets_client=client)
    return ok(request, f"{saved} rows saved.", data={"saved_count": saved})
