# Test bootstrap: in-memory SQLite for the mirror tables and a fake Sheets grid.
from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("ORDERLEDGER_SECRET", "test-secret")

import logging
import re
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from orderledger.db.base import Base
from orderledger.db import models  # side-effect: register all models

logger = logging.getLogger(__name__)

_RANGE = re.compile(r"^(?:'((?:[^']|'')+)'|([^!]+))!([A-Z]+)(\d*)(?::([A-Z]+)(\d*))?$")


def _col_to_index(col: str) -> int:
    n = 0
    for ch in col:
        n = n * 26 + (ord(ch) - 64)
    return n - 1


class FakeSheetsClient:
    """In-memory stand-in for SheetsClient.

    Cells holding formulas ("=...") render as formula_results[column letter]
    (default ""). Reads trim trailing empty cells and rows like the real API.
    """

    def __init__(self, tabs: Optional[Dict[str, List[List[Any]]]] = None) -> None:
        self.tabs: Dict[str, List[List[Any]]] = {k: [list(r) for r in v] for k, v in (tabs or {}).items()}
        self.formula_results: Dict[str, Any] = {}
        self.calls: List[tuple] = []
        self.batch_requests: List[dict] = []
        self.fail_on: Dict[str, Exception] = {}

    # -- helpers -------------------------------------------------------
    def _parse(self, range_: str):
        m = _RANGE.match(range_)
        if not m:
            raise ValueError(f"bad range {range_}")
        tab = (m.group(1) or "").replace("''", "'") or m.group(2)
        c1, r1, c2, r2 = m.group(3), m.group(4), m.group(5) or m.group(3), m.group(6)
        return tab, _col_to_index(c1), int(r1) if r1 else None, _col_to_index(c2), int(r2) if r2 else None

    def _render(self, value: Any, col_idx: int) -> Any:
        if isinstance(value, str) and value.startswith("="):
            letter = chr(65 + col_idx)
            return self.formula_results.get(letter, "")
        return value

    def _maybe_fail(self, op: str) -> None:
        exc = self.fail_on.get(op)
        if exc is not None:
            raise exc

    # -- SheetsClient API ---------------------------------------------
    def get_values(self, spreadsheet_id: str, range_: str, value_render_option: str = "UNFORMATTED_VALUE"):
        self.calls.append(("get_values", range_, value_render_option))
        self._maybe_fail("get_values")
        tab, c1, r1, c2, r2 = self._parse(range_)
        grid = self.tabs.get(tab, [])
        start = (r1 or 1) - 1
        end = r2 if r2 else len(grid)
        out: List[List[Any]] = []
        for row in grid[start:end]:
            cells = [self._render(row[i], i) if i < len(row) else "" for i in range(c1, c2 + 1)]
            while cells and cells[-1] in ("", None):
                cells.pop()
            out.append(cells)
        while out and not out[-1]:
            out.pop()
        return out

    def update_values(self, spreadsheet_id: str, range_: str, values, value_input_option: str = "USER_ENTERED"):
        self.calls.append(("update_values", range_, value_input_option))
        self._maybe_fail("update_values")
        tab, c1, r1, _, _ = self._parse(range_)
        grid = self.tabs.setdefault(tab, [])
        for offset, row in enumerate(values):
            r = (r1 or 1) - 1 + offset
            while len(grid) <= r:
                grid.append([])
            target = grid[r]
            for j, v in enumerate(row):
                c = c1 + j
                while len(target) <= c:
                    target.append("")
                target[c] = v

    def clear_values(self, spreadsheet_id: str, range_: str) -> None:
        self.calls.append(("clear_values", range_))
        tab, c1, r1, c2, r2 = self._parse(range_)
        grid = self.tabs.get(tab, [])
        for r in range((r1 or 1) - 1, min(r2 or len(grid), len(grid))):
            for c in range(c1, min(c2 + 1, len(grid[r]))):
                grid[r][c] = ""

    def get_sheet_id(self, spreadsheet_id: str, tab_name: str):
        names = list(self.tabs)
        return names.index(tab_name) if tab_name in names else None

    def batch_update(self, spreadsheet_id: str, requests: list) -> None:
        self.calls.append(("batch_update", len(requests)))
        self._maybe_fail("batch_update")
        self.batch_requests.extend(requests)

    # -- assertions ----------------------------------------------------
    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def owner(db):
    db.add(models.OwnerAccount(user_id="owner-1", googlesheet_id="sheet-1"))
    db.commit()
    return "owner-1"


@pytest.fixture
def fake_sheets():
    header = ["Date", "HI", "Item", "Option", "Qty", "Barcode"]
    return FakeSheetsClient(
        {
            "NewOrders": [header],
            "Payment": [header],
            "InProgress": [header],
            "Cancelled": [header],
            "Shipped": [header],
        }
    )
