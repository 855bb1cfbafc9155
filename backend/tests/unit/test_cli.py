"""
Unit Tests: CLI Commands

Test cases:
- balances over a YAML snapshot
- balances under the reject policy with an unreadable closed bet
- sweep over a YAML snapshot writes notifications back
"""

import argparse
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import yaml

from sidebet.__main__ import cmd_balances, cmd_sweep
from sidebet.bets.timing import to_iso_string
from sidebet.config import BalanceConfig, Settings
from sidebet.storage import load_snapshot


def _write_snapshot(path: Path, bets: dict) -> Path:
    path.write_text(yaml.safe_dump({"users": {"U": {"displayName": "Uma"}}, "bets": bets}))
    return path


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    settings = Settings(data_dir=tmp_path)
    monkeypatch.setattr("sidebet.__main__.get_settings", lambda: settings)
    return settings


def test_balances_command(settings: Settings, tmp_path: Path, capsys) -> None:
    path = _write_snapshot(
        tmp_path / "snapshot.yaml",
        {
            "bet1": {"title": "Derby", "status": "CLOSED", "participants": ["U", "A"], "winnerId": "A", "perUserWager": 10},
            "bet2": {"title": "Darts", "status": "CLOSED", "participants": ["U", "B"], "winnerId": "U", "perUserWager": 25},
        },
    )

    assert cmd_balances(argparse.Namespace(user="U", snapshot=str(path))) == 0

    out = capsys.readouterr().out
    assert "B: $25.00 (1 bets)" in out
    assert "A: $10.00 (1 bets)" in out
    assert "Net: $+15.00" in out


def test_balances_command_rejects_unreadable_closed_bet(
    settings: Settings, tmp_path: Path, capsys
) -> None:
    settings.balances = BalanceConfig(integrity_policy="reject")
    path = _write_snapshot(
        tmp_path / "snapshot.yaml",
        {"garbled": {"title": "Garbled", "status": "CLOSED", "participants": ["U", "A"], "winnerId": "U", "perUserWager": "lots"}},
    )

    assert cmd_balances(argparse.Namespace(user="U", snapshot=str(path))) == 1
    assert "garbled" in capsys.readouterr().out


def test_sweep_command_updates_snapshot(settings: Settings, tmp_path: Path) -> None:
    closing_at = to_iso_string(datetime.now(timezone.utc) + timedelta(minutes=30))
    path = _write_snapshot(
        tmp_path / "snapshot.yaml",
        {
            "soon": {
                "title": "Closes soon",
                "status": "OPEN",
                "participants": ["U", "A"],
                "picks": {"A": "NO"},
                "closingAt": closing_at,
                "closingSoonNotified": False,
            }
        },
    )

    assert cmd_sweep(argparse.Namespace(snapshot=str(path))) == 0

    reloaded = load_snapshot(path)
    assert reloaded.get("bets", "soon")["closingSoonNotified"] is True
    notifications = [doc.data for doc in reloaded.query("notifications")]
    assert [(n["userId"], n["type"]) for n in notifications] == [("U", "CLOSE_SOON")]
