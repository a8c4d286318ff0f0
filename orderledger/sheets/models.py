# orderledger/sheets/models.py

"""Ledger row layout and pydantic models for order items."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orderledger.config import LedgerTabsConfig


# Column extents per tab (the new-orders tab is written A..T; all tabs are read A..V)
NEW_ORDERS_LAST_COL = "T"
LEDGER_LAST_COL = "V"
NEW_ORDERS_WIDTH = 20

# 0-based column positions in a ledger row (A..V)
COL_DATE = 0             # A: MMDD, stored as text
COL_ORDER_NUMBER = 1     # B: PREFIX-YYMMDD-NNNN
COL_ITEM_NAME = 2        # C
COL_OPTION_NAME = 3      # D
COL_QUANTITY = 4         # E
COL_BARCODE = 5          # F: lookup key into the shipped tab
COL_OPTION_ID = 19       # T

# Lookup columns G..L filled by formulas against the shipped tab, keyed by barcode.
# Column letters are shared between the new-orders tab and the shipped tab.
LOOKUP_FIRST_COL = "G"
LOOKUP_LAST_COL = "L"
LOOKUP_COLUMNS: List[str] = ["G", "H", "I", "J", "K", "L"]
# Lookup columns whose computed values are coerced to numbers when materialized
NUMERIC_LOOKUP_COLUMNS: List[str] = ["I", "J"]

DATE_COL = "A"

# Canonical field per column of the A..V layout, shared by every ledger tab
LEDGER_FIELDS: List[str] = [
    "date",                   # A
    "order_number",           # B
    "item_name",              # C
    "option_name",            # D
    "order_qty",              # E
    "barcode",                # F
    "china_option1",          # G
    "china_option2",          # H
    "china_price",            # I
    "china_total_price",      # J
    "img_url",                # K
    "china_link",             # L
    "order_status_ordering",  # M
    "order_status_import",    # N
    "order_status_cancel",    # O
    "order_status_shipment",  # P
    "note",                   # Q
    "confirm_order_id",       # R
    "confirm_shipment_id",    # S
    "option_id",              # T
    "composition",            # U
    "shipment_info",          # V
]

INT_FIELDS = {
    "order_qty",
    "order_status_ordering",
    "order_status_import",
    "order_status_cancel",
    "order_status_shipment",
}
FLOAT_FIELDS = {"china_price", "china_total_price"}

# Tab codes used in synthetic mirror ids and the mirror's sheet_name column
TAB_CODE_NEW = "N"
TAB_CODE_PAYMENT = "P"
TAB_CODE_IN_PROGRESS = "O"
TAB_CODE_CANCELLED = "C"
TAB_CODE_SHIPPED = "D"


def ledger_tabs_in_order(tabs: LedgerTabsConfig) -> List[tuple[str, str]]:
    """(tab_name, tab_code) pairs in reconciliation order; the new tab is first."""
    return [
        (tabs.new, TAB_CODE_NEW),
        (tabs.payment, TAB_CODE_PAYMENT),
        (tabs.in_progress, TAB_CODE_IN_PROGRESS),
        (tabs.cancelled, TAB_CODE_CANCELLED),
        (tabs.shipped, TAB_CODE_SHIPPED),
    ]


class OrderItem(BaseModel):
    """A validated order item ready to become a ledger row."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    item_name: str = Field(..., min_length=1)
    option_name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    option_id: str = Field(..., min_length=1)
    barcode: Optional[str] = None

    @field_validator("item_name", "option_name", "option_id", "barcode", mode="before")
    @classmethod
    def coerce_text(cls, v):
        if v is None:
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class NewOrderRow(BaseModel):
    """One row of the new-orders tab as read back or written wholesale (A..T)."""

    model_config = ConfigDict(extra="ignore")

    date: str = ""
    order_number: str = ""
    item_name: str = ""
    option_name: str = ""
    order_qty: Optional[int] = None
    barcode: str = ""
    china_option1: str = ""
    china_option2: str = ""
    china_price: Optional[float] = None
    china_total_price: Optional[float] = None
    img_url: str = ""
    china_link: str = ""
    order_status_ordering: Optional[int] = None
    order_status_import: Optional[int] = None
    order_status_cancel: Optional[int] = None
    order_status_shipment: Optional[int] = None
    note: str = ""
    confirm_order_id: str = ""
    confirm_shipment_id: str = ""
    option_id: str = ""

    def to_sheet_row(self) -> List[object]:
        out: List[object] = []
        for field in LEDGER_FIELDS[:NEW_ORDERS_WIDTH]:
            value = getattr(self, field)
            out.append("" if value is None else value)
        return out
