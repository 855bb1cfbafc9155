"""
Unit Tests: HTTP API

Test cases:
- Balances endpoint (skip and reject policies, unreadable bet documents)
- Notifications listing and unread filter
- Settlement requests
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sidebet.api import create_app
from sidebet.config import BalanceConfig, Settings
from sidebet.notifications import NotificationDispatcher
from sidebet.storage import MemoryStore


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore(
        {
            "users": {"U": {"displayName": "Uma"}, "A": {"displayName": "Ann"}},
            "bets": {
                "bet1": {"title": "Derby", "status": "CLOSED", "participants": ["U", "A"], "winnerId": "A", "perUserWager": 10},
                "bet2": {"title": "Darts", "status": "CLOSED", "participants": ["U", "B"], "winnerId": "U", "perUserWager": 5},
                "bet3": {"title": "Rain", "status": "OPEN", "participants": ["U", "A"], "perUserWager": 100},
                "bad": {"title": "Broken", "status": "CLOSED", "participants": ["U", "A"], "winnerId": "Z", "perUserWager": 1},
            },
            "notifications": {
                "n1": {"userId": "U", "type": "WON", "isRead": True, "createdAt": datetime(2026, 1, 1, tzinfo=timezone.utc)},
                "n2": {"userId": "U", "type": "LOST", "isRead": False, "createdAt": datetime(2026, 1, 2, tzinfo=timezone.utc)},
                "n3": {"userId": "U", "type": "bet_closing", "read": False, "createdAt": "2026-01-03T00:00:00.000Z"},
                "n4": {"userId": "A", "type": "WON", "isRead": False},
            },
        }
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path)


@pytest.fixture
def client(store: MemoryStore, settings: Settings) -> TestClient:
    return TestClient(create_app(store, settings))


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_balances(client: TestClient) -> None:
    response = client.get("/api/users/U/balances")
    assert response.status_code == 200

    body = response.json()
    assert body["net_balance"] == -5
    assert [(b["user_id"], b["amount"]) for b in body["you_owe"]] == [("A", -10)]
    assert [(b["user_id"], b["amount"]) for b in body["owed_to_you"]] == [("B", 5)]
    assert [a["bet_id"] for a in body["anomalies"]] == ["bad"]


def test_balances_reject_policy(store: MemoryStore, settings: Settings) -> None:
    settings.balances = BalanceConfig(integrity_policy="reject")
    client = TestClient(create_app(store, settings))

    response = client.get("/api/users/U/balances")
    assert response.status_code == 422
    assert "bad" in response.json()["detail"]


def test_notifications_newest_first(client: TestClient) -> None:
    ids = [n["id"] for n in client.get("/api/users/U/notifications").json()]
    assert ids == ["n3", "n2", "n1"]


def test_unread_notifications(client: TestClient) -> None:
    response = client.get("/api/users/U/notifications", params={"unread_only": True})
    assert sorted(n["id"] for n in response.json()) == ["n2", "n3"]


def test_settlement_request(store: MemoryStore, settings: Settings) -> None:
    dispatcher = NotificationDispatcher(store, settings.notifications)
    client = TestClient(create_app(store, settings, dispatcher=dispatcher))

    response = client.post("/api/users/U/settlements", json={"counterparty_id": "B"})
    assert response.status_code == 201
    assert response.json()["amount"] == 5

    settlement = store.get("settlements", response.json()["id"])
    assert settlement["payerId"] == "B"
    assert settlement["betId"] == "bet2"

    requests = store.query("notifications", [("type", "==", "PAYMENT_REQUEST")])
    assert len(requests) == 1
    assert requests[0].data["userId"] == "B"
    assert requests[0].data["senderName"] == "Uma"


def test_settlement_request_for_debt_you_owe(client: TestClient) -> None:
    response = client.post("/api/users/U/settlements", json={"counterparty_id": "A"})
    assert response.status_code == 422


def test_settlement_request_without_balance(client: TestClient) -> None:
    response = client.post("/api/users/U/settlements", json={"counterparty_id": "nobody"})
    assert response.status_code == 422


def test_balances_lists_unreadable_closed_bet(store: MemoryStore, client: TestClient) -> None:
    store.create(
        "bets",
        "garbled",
        {"title": "Garbled", "status": "CLOSED", "participants": ["U", "C"], "winnerId": "U", "perUserWager": "lots"},
    )
    store.create(
        "bets",
        "legacy",
        {"title": "Pool", "type": "yesno", "status": "CLOSED", "participants": ["U", "D"], "winnerId": "U", "perUserWager": 50},
    )

    body = client.get("/api/users/U/balances").json()

    assert body["net_balance"] == 45
    assert sorted(a["bet_id"] for a in body["anomalies"]) == ["bad", "garbled"]
    assert "C" not in [b["user_id"] for b in body["owed_to_you"]]


def test_balances_reject_policy_on_unreadable_closed_bet(settings: Settings) -> None:
    store = MemoryStore(
        {
            "bets": {
                "garbled": {"title": "Garbled", "status": "CLOSED", "participants": ["U", "C"], "winnerId": "U", "perUserWager": "lots"},
            }
        }
    )
    settings.balances = BalanceConfig(integrity_policy="reject")
    client = TestClient(create_app(store, settings))

    response = client.get("/api/users/U/balances")
    assert response.status_code == 422
    assert "garbled" in response.json()["detail"]
