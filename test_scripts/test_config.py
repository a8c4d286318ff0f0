from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from orderledger.config import LedgerTabsConfig, Settings
from orderledger.sheets.models import ledger_tabs_in_order


def test_default_tabs_in_reconcile_order():
    pairs = ledger_tabs_in_order(LedgerTabsConfig())
    assert [code for _, code in pairs] == ["N", "P", "O", "C", "D"]
    assert pairs[0][0] == "NewOrders"


def test_tab_names_must_be_distinct_and_non_empty():
    with pytest.raises(ValidationError):
        LedgerTabsConfig(payment="NewOrders")
    with pytest.raises(ValidationError):
        LedgerTabsConfig(shipped="  ")


def test_nested_env_overrides_tab_names(monkeypatch):
    monkeypatch.setenv("LEDGER_TABS__SHIPPED", "Delivered")
    s = Settings(_env_file=None)
    assert s.LEDGER_TABS.shipped == "Delivered"
    assert s.LEDGER_TABS.new == "NewOrders"


def test_tabs_loaded_from_json_file(tmp_path):
    cfg = tmp_path / "tabs.json"
    cfg.write_text(
        json.dumps(
            {"new": "New", "payment": "Pay", "in_progress": "Doing", "cancelled": "Void", "shipped": "Sent"}
        ),
        encoding="utf-8",
    )
    s = Settings(_env_file=None, LEDGER_TABS_CONFIG_FILE=str(cfg))
    assert s.LEDGER_TABS.in_progress == "Doing"


def test_missing_tabs_file_fails(tmp_path):
    with pytest.raises(FileNotFoundError):
        Settings(_env_file=None, LEDGER_TABS_CONFIG_FILE=str(tmp_path / "nope.json"))


@pytest.mark.parametrize(
    "overrides",
    [
        {"MIRROR_INSERT_BATCH_SIZE": 501},
        {"MIRROR_INSERT_BATCH_SIZE": 0},
        {"RECALC_MAX_ATTEMPTS": 0},
        {"RECALC_STABLE_READS": 0},
    ],
)
def test_batch_and_poll_bounds(overrides):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **overrides)
