"""
Unit Tests: Settlement

Test cases:
- Ledger entries for a closed bet
- Settlement request document format
- Requests for counterparties who owe nothing
"""

from datetime import datetime, timezone

import pytest

from sidebet.bets.models import Bet
from sidebet.ledger import (
    LedgerIntegrityError,
    SettlementError,
    compute_balances,
    ledger_entries_for_bet,
    request_settlement,
)
from sidebet.storage import MemoryStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _closed(bet_id: str, participants: list[str], winner: str, wager: float = 10) -> Bet:
    return Bet(
        id=bet_id,
        title=f"Bet {bet_id}",
        status="CLOSED",
        participants=participants,
        winner_id=winner,
        per_user_wager=wager,
        group_id="g1",
    )


def test_ledger_entries_for_closed_bet() -> None:
    entries = ledger_entries_for_bet(_closed("b1", ["a", "b", "c"], "a"), NOW)

    assert [(e.from_user_id, e.to_user_id, e.amount) for e in entries] == [
        ("b", "a", 10),
        ("c", "a", 10),
    ]
    assert all(not e.settled for e in entries)
    assert entries[0].group_id == "g1"


def test_ledger_entries_require_closed_sound_bet() -> None:
    open_bet = _closed("b1", ["a", "b"], "a").model_copy(update={"status": "OPEN"})
    with pytest.raises(LedgerIntegrityError):
        ledger_entries_for_bet(open_bet)

    with pytest.raises(LedgerIntegrityError):
        ledger_entries_for_bet(_closed("b2", ["a", "b"], "zed"))


def test_request_settlement_single_bet() -> None:
    store = MemoryStore()
    summary = compute_balances([_closed("b1", ["a", "b"], "a")], "a")

    settlement_id = request_settlement(store, summary.counterparty("b"), "a", NOW)

    doc = store.get("settlements", settlement_id)
    assert doc["requesterId"] == "a"
    assert doc["payerId"] == "b"
    assert doc["amount"] == 10
    assert doc["status"] == "PENDING"
    assert doc["betId"] == "b1"
    assert doc["betTitle"] == "Bet b1"


def test_request_settlement_multiple_bets() -> None:
    store = MemoryStore()
    bets = [_closed("b1", ["a", "b"], "a"), _closed("b2", ["a", "b"], "a", wager=5)]
    summary = compute_balances(bets, "a")

    settlement_id = request_settlement(store, summary.counterparty("b"), "a", NOW)

    doc = store.get("settlements", settlement_id)
    assert doc["amount"] == 15
    assert "betId" not in doc
    assert "betTitle" not in doc


def test_cannot_request_from_someone_you_owe() -> None:
    summary = compute_balances([_closed("b1", ["a", "b"], "b")], "a")

    with pytest.raises(SettlementError):
        request_settlement(MemoryStore(), summary.counterparty("b"), "a", NOW)
