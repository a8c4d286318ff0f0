# orderledger/api/routes/orders.py

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from orderledger.api.deps import get_db, require_shared_secret
from orderledger.api.errors import ok
from orderledger.api.schemas.ledger import LedgerResponse, OwnerRequest
from orderledger.services.purchase_status_service import search_purchase_status


router = APIRouter(prefix="/orders", tags=["orders"], dependencies=[Depends(require_shared_secret)])


@router.post("/search-purchase-status", response_model=LedgerResponse)
def purchase_status(req: OwnerRequest, request: Request, db: Session = Depends(get_db)) -> LedgerResponse:
    """
    Match the owner's personal orders to mirrored ledger rows tagged "P-...".
    """
    result = search_purchase_status(db, req.owner_id)
    return ok(request, f"{result.matched_count} orders matched.", data=result.to_dict())
