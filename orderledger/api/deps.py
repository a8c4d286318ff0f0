from __future__ import annotations

from typing import Generator

from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from orderledger.config import settings
from orderledger.db.session import SessionLocal
from orderledger.sheets.client import SheetsClient, get_sheets_service


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_sheets_client() -> SheetsClient:
    return SheetsClient(get_sheets_service())


def require_shared_secret(x_orderledger_secret: str | None = Header(default=None)) -> None:
    """
    Shared secret header sent by the dashboard backend.
    Header name: X-ORDERLEDGER-SECRET
    """
    expected = settings.ORDERLEDGER_SECRET
    if not expected:
        # If secret isn't configured, fail closed.
        raise HTTPException(status_code=500, detail="ORDERLEDGER_SECRET is not configured")

    if not x_orderledger_secret or x_orderledger_secret != expected:
        raise HTTPException(status_code=401, detail="Unauthorized")
