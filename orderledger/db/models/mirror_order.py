# orderledger/db/models/mirror_order.py

from sqlalchemy import Column, Float, Integer, String, Text

from orderledger.db.base import Base


class MirrorOrder(Base):
    """Relational copy of one ledger row, rebuilt wholesale per reconciliation.

    id is synthetic: {business_code}-{tab_code}-{sheet_row_number}.
    Field names match the external table contract exactly.
    """

    __tablename__ = "chinaorder_googlesheet_all"

    user_id = Column(String(255), primary_key=True, index=True)
    id = Column(String(100), primary_key=True)

    sheet_name = Column(String(5), index=True, nullable=False)  # tab code N/P/O/C/D

    # A..F
    date = Column(String(20), nullable=True)
    order_number = Column(String(100), nullable=True)
    item_name = Column(Text, nullable=True)
    option_name = Column(Text, nullable=True)
    order_qty = Column(Integer, nullable=True)
    barcode = Column(String(100), nullable=True)

    # G..L (lookup values)
    china_option1 = Column(Text, nullable=True)
    china_option2 = Column(Text, nullable=True)
    china_price = Column(Float, nullable=True)
    china_total_price = Column(Float, nullable=True)
    img_url = Column(Text, nullable=True)
    china_link = Column(Text, nullable=True)

    # M..P
    order_status_ordering = Column(Integer, nullable=True)
    order_status_import = Column(Integer, nullable=True)
    order_status_cancel = Column(Integer, nullable=True)
    order_status_shipment = Column(Integer, nullable=True)

    # Q..V
    note = Column(Text, nullable=True)
    confirm_order_id = Column(String(100), nullable=True)
    confirm_shipment_id = Column(String(100), nullable=True)
    option_id = Column(String(100), nullable=True)
    composition = Column(Text, nullable=True)
    shipment_info = Column(Text, nullable=True)
