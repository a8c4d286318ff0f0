# orderledger/db/models/owner.py

from sqlalchemy import Column, String

from orderledger.db.base import Base


class OwnerAccount(Base):
    """Seller account row; only the spreadsheet link is consumed here.

    Table and column names are an external contract.
    """

    __tablename__ = "users_api"

    user_id = Column(String(255), primary_key=True)
    googlesheet_id = Column(String(255), nullable=True)
