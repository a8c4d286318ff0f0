# orderledger/db/models/personal_order.py

from sqlalchemy import Column, String

from orderledger.db.base import Base


class PersonalOrder(Base):
    """Marketplace order matched against mirror rows by purchase-status search."""

    __tablename__ = "coupang_personal_order"

    id = Column(String(100), primary_key=True)
    user_id = Column(String(255), index=True, nullable=False)
    order_number = Column(String(100), nullable=True)
    recipient_name = Column(String(255), nullable=True)

    # Mirror record id of the matched ledger row
    purchase_status = Column(String(100), nullable=True)
