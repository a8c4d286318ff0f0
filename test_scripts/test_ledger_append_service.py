"""Append pipeline against the in-memory sheet and SQLite owner table."""

from __future__ import annotations

from datetime import date

import pytest

from orderledger.errors import ExternalDependencyError, NoValidRowsError, OwnerNotFoundError
from orderledger.services.ledger_append_service import append_batch
from orderledger.sheets.formula_materializer import RecalcPollPolicy

TODAY = date(2025, 6, 27)
FAST = dict(
    policy=RecalcPollPolicy(initial_delay=0, interval=0, max_attempts=3, stable_reads=2),
    sleep=lambda _: None,
    today=lambda: TODAY,
)


def _order(name="Shirt", barcode="BC1", **extra):
    data = {"item_name": name, "option_name": "S", "quantity": 1, "option_id": "OPT-" + name, "barcode": barcode}
    data.update(extra)
    return data


def _with_rows(fake_sheets, count):
    header = fake_sheets.tabs["NewOrders"][0]
    fake_sheets.tabs["NewOrders"] = [header] + [["0601", f"OLD-{i}", "x"] for i in range(count)]


def test_appends_after_existing_rows(db, owner, fake_sheets):
    _with_rows(fake_sheets, 4)  # 5 rows including the header
    fake_sheets.formula_results = {"G": "red", "I": "'10", "J": "20"}

    result = append_batch(db, owner, [_order()], sheets_client=fake_sheets, **FAST)

    assert result.range == "NewOrders!A6:T6"
    assert result.next_row == 6
    assert result.processed_count == 1
    assert result.failed_count == 0
    assert result.materialized is True
    assert result.processed_orders[0]["order_number"] == "ORD-250627-0006"

    row = fake_sheets.tabs["NewOrders"][5]
    assert row[0] == "0627"
    assert row[1] == "ORD-250627-0006"
    # lookup columns hold literal values, not formulas
    assert row[6:10] == ["red", "", 10, 20]
    assert row[19] == "OPT-Shirt"


def test_call_sequence(db, owner, fake_sheets):
    fake_sheets.formula_results = {"G": "red"}
    append_batch(db, owner, [_order()], sheets_client=fake_sheets, **FAST)

    assert fake_sheets.calls == [
        ("get_values", "NewOrders!A:T", "UNFORMATTED_VALUE"),
        ("update_values", "NewOrders!A2:T2", "USER_ENTERED"),
        ("get_values", "NewOrders!G2:L2", "FORMATTED_VALUE"),
        ("get_values", "NewOrders!G2:L2", "FORMATTED_VALUE"),
        ("update_values", "NewOrders!G2:L2", "RAW"),
        ("batch_update", 1),
        ("update_values", "NewOrders!A2:A2", "RAW"),
    ]


def test_invalid_items_are_counted_not_written(db, owner, fake_sheets):
    fake_sheets.formula_results = {"G": "red"}
    orders = [_order("A"), _order("B", option_id=None), _order("C")]

    result = append_batch(db, owner, orders, sheets_client=fake_sheets, **FAST)

    assert result.processed_count == 2
    assert result.failed_count == 1
    assert result.range == "NewOrders!A2:T3"
    assert [r[2] for r in fake_sheets.tabs["NewOrders"][1:]] == ["A", "C"]


def test_no_valid_rows_writes_nothing(db, owner, fake_sheets):
    with pytest.raises(NoValidRowsError) as exc:
        append_batch(db, owner, [_order(option_id="")], sheets_client=fake_sheets, **FAST)

    assert exc.value.data == {"processed_count": 0, "failed_count": 1}
    assert "update_values" not in fake_sheets.call_names()


def test_repeated_calls_append_twice_with_increasing_numbers(db, owner, fake_sheets):
    fake_sheets.formula_results = {"G": "red"}
    first = append_batch(db, owner, [_order("A"), _order("B")], sheets_client=fake_sheets, **FAST)
    second = append_batch(db, owner, [_order("A"), _order("B")], sheets_client=fake_sheets, **FAST)

    assert first.range == "NewOrders!A2:T3"
    assert second.range == "NewOrders!A4:T5"
    assert len(fake_sheets.tabs["NewOrders"]) == 5
    numbers = [o["order_number"] for o in first.processed_orders + second.processed_orders]
    assert numbers == sorted(numbers)
    assert len(set(numbers)) == 4


def test_unresolved_formulas_are_reported(db, owner, fake_sheets):
    result = append_batch(db, owner, [_order(barcode="")], sheets_client=fake_sheets, **FAST)

    assert result.materialized is False
    assert result.processed_count == 1
    assert fake_sheets.tabs["NewOrders"][1][6].startswith("=IF(")


def test_unknown_owner(db, fake_sheets):
    with pytest.raises(OwnerNotFoundError):
        append_batch(db, "nobody", [_order()], sheets_client=fake_sheets, **FAST)
    assert fake_sheets.calls == []


def test_sheets_failure_is_wrapped(db, owner, fake_sheets):
    fake_sheets.fail_on["update_values"] = RuntimeError("quota exceeded")

    with pytest.raises(ExternalDependencyError) as exc:
        append_batch(db, owner, [_order()], sheets_client=fake_sheets, **FAST)

    assert exc.value.code == "INTERNAL_ERROR"
    assert isinstance(exc.value.__cause__, RuntimeError)
