# orderledger/services/purchase_status_service.py

"""
Link marketplace orders to the mirror rows that fulfil them.

Ledger rows tag personal-purchase shipments in shipment_info as
"P-<order_number> <recipient name>" or "P-<recipient name>". For each of
the owner's personal orders:
  1. match on order number (token right after "P-")
  2. otherwise match on recipient name (text after the first space, or
     everything after "P-" when there is no space)
A match stores the mirror row id in PersonalOrder.purchase_status.
Run after reconciliation; mirror ids change only when ledger rows move.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from orderledger.db.models.mirror_order import MirrorOrder
from orderledger.db.models.personal_order import PersonalOrder
from orderledger.services.mirror_repository import MirrorRepository

logger = logging.getLogger(__name__)

SHIPMENT_PREFIX = "P-"
_ORDER_TOKEN = re.compile(r"^P-(\S+)")


@dataclass
class PurchaseMatch:
    order_id: str
    order_number: str
    recipient_name: str
    matched_mirror_id: str
    match_type: str


@dataclass
class PurchaseStatusResult:
    total_orders: int = 0
    matched_count: int = 0
    results: List[PurchaseMatch] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def shipment_order_token(shipment_info: str) -> Optional[str]:
    m = _ORDER_TOKEN.match(shipment_info or "")
    return m.group(1) if m else None


def shipment_recipient_name(shipment_info: str) -> str:
    info = shipment_info or ""
    if " " in info:
        return info.split(" ", 1)[1]
    return info[len(SHIPMENT_PREFIX):] if info.startswith(SHIPMENT_PREFIX) else info


def find_match(order: PersonalOrder, candidates: List[MirrorOrder]) -> Optional[tuple[MirrorOrder, str]]:
    order_number = order.order_number or ""
    recipient = order.recipient_name or ""
    if order_number:
        for mirror in candidates:
            if shipment_order_token(mirror.shipment_info) == order_number:
                return mirror, "order_number"
    if recipient:
        for mirror in candidates:
            if shipment_recipient_name(mirror.shipment_info) == recipient:
                return mirror, "recipient_name"
    return None


def search_purchase_status(db: Session, owner_id: str) -> PurchaseStatusResult:
    orders = list(
        db.execute(select(PersonalOrder).where(PersonalOrder.user_id == owner_id)).scalars().all()
    )
    result = PurchaseStatusResult(total_orders=len(orders))
    if not orders:
        logger.info("purchase_status.no_orders", extra={"owner_id": owner_id})
        return result

    candidates = MirrorRepository(db).list_for_owner(owner_id, shipment_info_prefix=SHIPMENT_PREFIX)
    if not candidates:
        logger.info("purchase_status.no_candidates", extra={"owner_id": owner_id})
        return result

    for order in orders:
        found = find_match(order, candidates)
        if found is None:
            continue
        mirror, match_type = found
        order.purchase_status = mirror.id
        result.results.append(
            PurchaseMatch(
                order_id=order.id,
                order_number=order.order_number or "",
                recipient_name=order.recipient_name or "",
                matched_mirror_id=mirror.id,
                match_type=match_type,
            )
        )
    db.commit()
    result.matched_count = len(result.results)
    logger.info(
        "purchase_status.done",
        extra={"owner_id": owner_id, "total": result.total_orders, "count": result.matched_count},
    )
    return result
