from __future__ import annotations

import pytest

from orderledger.sheets.ledger_reader import header_cell, map_ledger_cells
from orderledger.utils.a1 import col_index_to_a1, quote_tab
from orderledger.utils.cells import is_empty_row, to_float, to_int


@pytest.mark.parametrize("idx, letter", [(1, "A"), (6, "F"), (22, "V"), (26, "Z"), (27, "AA")])
def test_col_index_to_a1(idx, letter):
    assert col_index_to_a1(idx) == letter


def test_quote_tab():
    assert quote_tab("Shipped") == "Shipped"
    assert quote_tab("Shipped Items") == "'Shipped Items'"
    assert quote_tab("Kim's") == "'Kim''s'"


def test_numeric_parsing():
    assert to_float("1,234.5") == 1234.5
    assert to_float("") is None
    assert to_float(True) is None
    assert to_int("3.9") == 3
    assert to_int("n/a") is None


@pytest.mark.parametrize("text", ["NaN", "nan", "inf", "-Infinity", "1e999"])
def test_non_finite_numbers_are_absent(text):
    assert to_float(text) is None
    assert to_int(text) is None


def test_non_finite_float_cells_are_absent():
    assert to_float(float("nan")) is None
    assert to_int(float("inf")) is None
    assert to_float(10 ** 400) is None


def test_empty_row():
    assert is_empty_row(["", None, "  "])
    assert not is_empty_row(["", "x"])


def test_map_ledger_cells_fills_missing_columns():
    row = map_ledger_cells(["0627", "ORD-1", "Shirt", "S", "2"])
    assert len(row) == 22
    assert row["order_qty"] == 2
    assert row["china_price"] is None
    assert row["order_status_cancel"] is None
    assert row["shipment_info"] == ""


def test_header_cell():
    assert header_cell([["Date", " HI "]], 1) == "HI"
    assert header_cell([["Date"]], 1) == ""
    assert header_cell([], 1) == ""
