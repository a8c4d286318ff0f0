from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from orderledger.config import MAX_INSERT_BATCH_SIZE, settings
from orderledger.db.models.mirror_order import MirrorOrder
from orderledger.services.mirror_mapper import MirrorRecord

logger = logging.getLogger(__name__)


class MirrorRepository:
    """Delete / chunked insert / filtered select on the mirror table.

    Every write commits on its own: a failing chunk leaves earlier chunks
    (and the preceding delete) committed.
    """

    def __init__(self, db: Session, batch_size: Optional[int] = None) -> None:
        self.db = db
        size = batch_size or settings.MIRROR_INSERT_BATCH_SIZE
        self.batch_size = min(size, MAX_INSERT_BATCH_SIZE)

    def delete_for_owner(self, owner_id: str) -> int:
        try:
            result = self.db.execute(delete(MirrorOrder).where(MirrorOrder.user_id == owner_id))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        deleted = result.rowcount or 0
        logger.info("mirror.delete", extra={"owner_id": owner_id, "count": deleted})
        return deleted

    def insert_records(self, records: Sequence[MirrorRecord]) -> int:
        """Insert in chunks of at most batch_size rows; returns rows inserted."""
        inserted = 0
        for start in range(0, len(records), self.batch_size):
            chunk = list(records[start:start + self.batch_size])
            try:
                self.db.execute(insert(MirrorOrder), chunk)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
            inserted += len(chunk)
            logger.debug("mirror.insert_batch", extra={"count": len(chunk), "total": inserted})
        return inserted

    def list_for_owner(
        self,
        owner_id: str,
        *,
        sheet_name: Optional[str] = None,
        shipment_info_prefix: Optional[str] = None,
    ) -> List[MirrorOrder]:
        stmt = select(MirrorOrder).where(MirrorOrder.user_id == owner_id)
        if sheet_name is not None:
            stmt = stmt.where(MirrorOrder.sheet_name == sheet_name)
        if shipment_info_prefix is not None:
            stmt = stmt.where(MirrorOrder.shipment_info.like(f"{shipment_info_prefix}%"))
        stmt = stmt.order_by(MirrorOrder.sheet_name, MirrorOrder.id)
        return list(self.db.execute(stmt).scalars().all())
