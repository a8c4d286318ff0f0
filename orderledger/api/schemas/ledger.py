# orderledger/api/schemas/ledger.py

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field


class OwnerRequest(BaseModel):
    owner_id: str = Field(..., min_length=1, validation_alias=AliasChoices("owner_id", "user_id"))


class AppendBatchRequest(OwnerRequest):
    # Items are validated one by one later; invalid ones are dropped, not rejected here
    orders: List[Any] = Field(..., min_length=1)


class ReplaceNewOrdersRequest(OwnerRequest):
    orders: List[Dict[str, Any]] = Field(default_factory=list)


class LedgerResponse(BaseModel):
    success: bool
    message: str
    error_code: Optional[str] = None
    data: Optional[Any] = None
    processing_time_ms: int = 0
