from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from orderledger.db.models.owner import OwnerAccount
from orderledger.errors import OwnerNotFoundError, SpreadsheetNotFoundError

logger = logging.getLogger(__name__)


def resolve_spreadsheet_id(db: Session, owner_id: str) -> str:
    """Return the owner's linked spreadsheet id.

    Raises OwnerNotFoundError / SpreadsheetNotFoundError (both NOT_FOUND).
    """
    owner = db.execute(
        select(OwnerAccount).where(OwnerAccount.user_id == owner_id)
    ).scalar_one_or_none()
    if owner is None:
        logger.warning("owner.not_found", extra={"owner_id": owner_id})
        raise OwnerNotFoundError(f"Owner '{owner_id}' not found")

    spreadsheet_id = (owner.googlesheet_id or "").strip()
    if not spreadsheet_id:
        logger.warning("owner.no_spreadsheet", extra={"owner_id": owner_id})
        raise SpreadsheetNotFoundError(f"Owner '{owner_id}' has no linked spreadsheet")
    return spreadsheet_id
