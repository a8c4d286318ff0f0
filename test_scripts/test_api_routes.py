"""Route tests through FastAPI's TestClient with DB and Sheets overridden."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from orderledger.api.deps import get_db, get_sheets_client
from orderledger.config import settings
from orderledger.main import app

HEADERS = {"X-ORDERLEDGER-SECRET": "test-secret"}


@pytest.fixture
def client(db, owner, fake_sheets, monkeypatch):
    monkeypatch.setattr(settings, "RECALC_INITIAL_DELAY_SECONDS", 0.0)
    monkeypatch.setattr(settings, "RECALC_POLL_INTERVAL_SECONDS", 0.0)

    def _db():
        yield db

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_sheets_client] = lambda: fake_sheets
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


def _order(name="Shirt"):
    return {"item_name": name, "option_name": "S", "quantity": 1, "option_id": "OPT1", "barcode": "BC1"}


def test_health_needs_no_secret():
    assert TestClient(app).get("/health").json() == {"ok": True}


def test_missing_secret_is_rejected(client):
    resp = client.post("/ledger/reconcile", json={"owner_id": "owner-1"})
    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["error_code"] == "UNAUTHORIZED"
    assert "processing_time_ms" in body


def test_append_batch(client, fake_sheets):
    fake_sheets.formula_results = {"G": "red"}

    resp = client.post(
        "/ledger/orders/batch",
        json={"owner_id": "owner-1", "orders": [_order("A"), _order("B"), {"item_name": "broken"}]},
        headers=HEADERS,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "2 orders appended."
    assert body["data"]["range"] == "NewOrders!A2:T3"
    assert body["data"]["processed_count"] == 2
    assert body["data"]["failed_count"] == 1
    assert isinstance(body["processing_time_ms"], int)


def test_append_batch_accepts_user_id_alias(client, fake_sheets):
    resp = client.post("/ledger/orders/batch", json={"user_id": "owner-1", "orders": [_order()]}, headers=HEADERS)
    assert resp.status_code == 200


def test_append_batch_no_valid_rows(client, fake_sheets):
    resp = client.post(
        "/ledger/orders/batch",
        json={"owner_id": "owner-1", "orders": [{"item_name": "x"}]},
        headers=HEADERS,
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["error_code"] == "NO_VALID_ROWS"
    assert body["data"] == {"processed_count": 0, "failed_count": 1}
    assert "update_values" not in fake_sheets.call_names()


@pytest.mark.parametrize(
    "payload",
    [
        {"owner_id": "owner-1", "orders": []},
        {"owner_id": "", "orders": [{"item_name": "x"}]},
        {"orders": [{"item_name": "x"}]},
    ],
)
def test_malformed_request_is_invalid_input(client, fake_sheets, payload):
    resp = client.post("/ledger/orders/batch", json=payload, headers=HEADERS)
    assert resp.status_code == 400
    assert resp.json()["error_code"] == "INVALID_INPUT"
    assert fake_sheets.calls == []


def test_unknown_owner_is_not_found(client):
    resp = client.post("/ledger/reconcile", json={"owner_id": "nobody"}, headers=HEADERS)
    assert resp.status_code == 404
    assert resp.json()["error_code"] == "NOT_FOUND"


def test_reconcile(client, fake_sheets):
    header = fake_sheets.tabs["NewOrders"][0]
    fake_sheets.tabs["Shipped"] = [header, ["0627", "ORD-1", "Shirt"]]

    resp = client.post("/ledger/reconcile", json={"owner_id": "owner-1"}, headers=HEADERS)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total_count"] == 1
    assert data["business_code"] == "HI"
    assert [t["status"] for t in data["tabs"]] == ["skipped", "skipped", "skipped", "skipped", "inserted"]


def test_unexpected_error_is_internal_error(client):
    with patch("orderledger.api.routes.ledger.run_reconcile_all", side_effect=RuntimeError("boom")):
        resp = client.post("/ledger/reconcile", json={"owner_id": "owner-1"}, headers=HEADERS)

    assert resp.status_code == 500
    body = resp.json()
    assert body["error_code"] == "INTERNAL_ERROR"
    assert "boom" not in body["message"]
    assert "data" not in body


def test_new_orders_read_and_replace(client, fake_sheets):
    resp = client.post(
        "/ledger/new-orders/replace",
        json={"owner_id": "owner-1", "orders": [{"date": "0627", "order_number": "X-1", "option_id": "OPT1"}]},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["data"] == {"saved_count": 1}

    resp = client.post("/ledger/new-orders/read", json={"owner_id": "owner-1"}, headers=HEADERS)
    rows = resp.json()["data"]
    assert len(rows) == 1
    assert rows[0]["row_number"] == 2
    assert rows[0]["order_number"] == "X-1"
    assert rows[0]["option_id"] == "OPT1"


def test_search_purchase_status(client):
    resp = client.post("/orders/search-purchase-status", json={"owner_id": "owner-1"}, headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"total_orders": 0, "matched_count": 0, "results": []}
