"""
E2E tests for investor personas, driven entirely through the HTTP API.

Investor personas:
- newcomer: linked login, no units yet, all-zero dashboard
- steady: two profitable sales, payouts received
- unlucky: sale below cost, no profit credited
- flipper: the same unit bought and sold twice, capital counted once
- outsider: login with no investor record, not-linked state
"""

import pytest
from fastapi.testclient import TestClient
from tests.conftest import ADMIN_HEADERS


def _headers(user_id: str) -> dict:
    return {"X-User-ID": user_id, "X-User-Role": "INVESTOR"}


def _create_investor(client: TestClient, name: str, user_id: str) -> str:
    response = client.post(
        "/v1/investors",
        json={"name": name, "margin_percentage": 40, "user_id": user_id},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    return response.json()["id"]


def _buy(client: TestClient, investor_id: str, code: str, trx_code: str, buy_price: float, unit_id: str = None) -> dict:
    if unit_id is None:
        unit = client.post(
            "/v1/units",
            json={"investor_id": investor_id, "name": "Xenia", "plate_number": f"D {code[-3:]} AB", "code": code},
            headers=ADMIN_HEADERS,
        )
        assert unit.status_code == 200
        unit_id = unit.json()["id"]

    txn = client.post(
        "/v1/transactions",
        json={"unit_id": unit_id, "transaction_code": trx_code, "buy_date": "2025-01-15", "buy_price": buy_price},
        headers=ADMIN_HEADERS,
    )
    assert txn.status_code == 200
    return txn.json()


def _sell(client: TestClient, transaction_id: str, sell_price: float) -> dict:
    response = client.post(
        f"/v1/transactions/{transaction_id}/sell",
        json={"sell_date": "2025-03-01", "sell_price": sell_price},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    return response.json()


def _pay(client: TestClient, transaction_id: str, investor_id: str, amount: float):
    response = client.post(
        f"/v1/transactions/{transaction_id}/payments",
        json={"investor_id": investor_id, "amount": amount, "payment_date": "2025-03-05T09:00:00Z", "method": "CASH"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200


@pytest.mark.integration
def test_newcomer_zero_dashboard(client: TestClient):
    """
    newcomer: Linked but owns nothing
    Expected: linked dashboard with every figure at zero
    """
    _create_investor(client, "Newcomer", "user_newcomer")

    data = client.get("/v1/me/dashboard", headers=_headers("user_newcomer")).json()

    assert data["linked"] is True
    assert data["stats"] == {
        "total_invested": 0,
        "total_profit": 0,
        "total_received": 0,
        "active_units_count": 0,
        "total_units_count": 0,
    }
    assert data["recent_transactions"] == []


@pytest.mark.integration
def test_steady_profitable_investor(client: TestClient):
    """
    steady: Two units sold at a profit, one payout
    Expected: profit is the sum of both investor shares
    """
    investor_id = _create_investor(client, "Steady", "user_steady")
    first = _buy(client, investor_id, "UNT-101", "TRX-2025-101", 100_000)
    second = _buy(client, investor_id, "UNT-102", "TRX-2025-102", 50_000)
    _sell(client, first["id"], 110_000)
    _sell(client, second["id"], 55_000)
    _pay(client, first["id"], investor_id, 104_000)

    data = client.get("/v1/me/dashboard", headers=_headers("user_steady")).json()

    assert data["stats"]["total_invested"] == 150_000
    assert data["stats"]["total_profit"] == pytest.approx(6_000)
    assert data["stats"]["total_received"] == 104_000
    assert data["stats"]["active_units_count"] == 0
    assert data["stats"]["total_units_count"] == 2


@pytest.mark.integration
def test_unlucky_investor_loss(client: TestClient):
    """
    unlucky: Sold below cost
    Expected: no profit credited, capital still counted
    """
    investor_id = _create_investor(client, "Unlucky", "user_unlucky")
    txn = _buy(client, investor_id, "UNT-201", "TRX-2025-201", 80_000)
    sale = _sell(client, txn["id"], 70_000)

    assert sale["transaction"]["profit_status"] == "LOSS"
    assert sale["profit_sharing"]["investor_profit_amount"] == 0

    data = client.get("/v1/me/dashboard", headers=_headers("user_unlucky")).json()
    assert data["stats"]["total_invested"] == 80_000
    assert data["stats"]["total_profit"] == 0


@pytest.mark.integration
def test_flipper_capital_counted_once(client: TestClient):
    """
    flipper: Same unit turned over twice
    Expected: only the first transaction's capital is counted, profits add up
    """
    investor_id = _create_investor(client, "Flipper", "user_flipper")
    first = _buy(client, investor_id, "UNT-301", "TRX-2025-301", 100_000)
    _sell(client, first["id"], 105_000)
    second = _buy(client, investor_id, "UNT-301", "TRX-2025-302", 120_000, unit_id=first["unit_id"])
    _sell(client, second["id"], 130_000)

    data = client.get("/v1/me/dashboard", headers=_headers("user_flipper")).json()

    assert data["stats"]["total_invested"] == 100_000
    assert data["stats"]["total_profit"] == pytest.approx(2_000 + 4_000)
    assert data["stats"]["total_units_count"] == 1
    assert len(data["recent_transactions"]) == 2


@pytest.mark.integration
def test_outsider_not_linked(client: TestClient):
    """
    outsider: Authenticated user without an investor record
    Expected: not-linked state rather than an error
    """
    response = client.get("/v1/me/dashboard", headers=_headers("user_outsider"))

    assert response.status_code == 200
    assert response.json()["linked"] is False
