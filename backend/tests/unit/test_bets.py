"""
Unit Tests: Bet Helpers

Test cases:
- Judging (yes/no, closest guess ties, invalid answers, leaderboard rows)
- Feed filtering, sorting and search
- Creation, deletion and judging validation
- Countdown text and live percentages
"""

from datetime import datetime, timedelta, timezone

import pytest

from sidebet.bets import (
    Bet,
    BetCreationData,
    JudgingError,
    empty_state_message,
    filter_bets,
    judge_bet,
    live_percentages,
    search_bets,
    sort_bets,
    time_remaining,
    to_iso_string,
    validate_bet_creation,
    validate_bet_deletion,
    validate_bet_judging,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _bet(**fields) -> Bet:
    return Bet(**{"id": "b1", "title": "Derby", "per_user_wager": 10, **fields})


# =========================================================================
# Judging
# =========================================================================


def test_judge_yes_no_splits_pot_between_winners() -> None:
    bet = _bet(
        participants=["a", "b", "c", "d"],
        picks={"a": "YES", "b": "YES", "c": "NO", "d": "NO"},
        group_id="g1",
    )
    result = judge_bet(bet, "YES", now=NOW)

    assert result.winners == ["a", "b"]
    assert result.total_pot == 40
    assert result.payout_per_winner == 20

    rows = {row.user_id: row for row in result.leaderboard}
    assert rows["a"].balance == 20
    assert rows["a"].wins == 1
    assert rows["c"].balance == -10
    assert rows["c"].losses == 1
    assert rows["a"].document_id == "g1_a"


def test_judge_bet_updates() -> None:
    bet = _bet(participants=["a", "b"], picks={"a": "OVER", "b": "UNDER"}, type="OVER_UNDER")
    updates = judge_bet(bet, "UNDER", now=NOW).bet_updates()

    assert updates["status"] == "JUDGED"
    assert updates["winners"] == ["b"]
    assert updates["judgedAt"] == "2026-03-01T12:00:00.000Z"
    assert updates["payoutPerWinner"] == 20


def test_judge_closest_guess_ties_share_pot() -> None:
    bet = _bet(
        type="CLOSEST_GUESS",
        participants=["a", "b", "c"],
        picks={"a": 8, "b": 12, "c": 20},
    )
    result = judge_bet(bet, "10")

    assert sorted(result.winners) == ["a", "b"]
    assert result.correct_answer == 10
    assert result.payout_per_winner == 15


def test_judge_closest_guess_rejects_non_numeric_answer() -> None:
    bet = _bet(type="CLOSEST_GUESS", participants=["a"], picks={"a": 3})

    with pytest.raises(JudgingError, match="valid number"):
        judge_bet(bet, "lots")


def test_judge_closest_guess_without_guesses() -> None:
    bet = _bet(type="CLOSEST_GUESS", participants=["a"], picks={})

    with pytest.raises(JudgingError, match="No guesses"):
        judge_bet(bet, 5)


# =========================================================================
# Filters
# =========================================================================


@pytest.fixture
def feed() -> list[Bet]:
    return [
        _bet(
            id="mine",
            title="Who wins the derby",
            participants=["u"],
            closing_at=to_iso_string(NOW + timedelta(hours=2)),
            created_at=to_iso_string(NOW - timedelta(days=2)),
            group_id="g2",
            per_user_wager=5,
        ),
        _bet(
            id="joinable",
            title="Rain on Saturday",
            participants=["x"],
            closing_at=to_iso_string(NOW + timedelta(days=3)),
            created_at=to_iso_string(NOW - timedelta(days=1)),
            group_id="g1",
            per_user_wager=20,
        ),
        _bet(
            id="closed",
            title="Old bet",
            status="CLOSED",
            participants=["x"],
            closing_at=to_iso_string(NOW - timedelta(hours=1)),
        ),
    ]


def test_filter_tabs(feed: list[Bet]) -> None:
    assert [b.id for b in filter_bets(feed, "open", "u", NOW)] == ["joinable"]
    assert [b.id for b in filter_bets(feed, "myPicks", "u", NOW)] == ["mine"]
    assert [b.id for b in filter_bets(feed, "closingSoon", "u", NOW)] == ["mine"]
    assert len(filter_bets(feed, "all", "u", NOW)) == 3


def test_sort_options(feed: list[Bet]) -> None:
    assert [b.id for b in sort_bets(feed, "closingSoon")] == ["closed", "mine", "joinable"]
    assert [b.id for b in sort_bets(feed, "recent")][:2] == ["joinable", "mine"]
    assert [b.id for b in sort_bets(feed, "wager")][0] == "joinable"

    by_group = sort_bets(feed, "group", {"g1": "Alpha", "g2": "Beta"})
    assert [b.id for b in by_group] == ["closed", "joinable", "mine"]


def test_search(feed: list[Bet]) -> None:
    assert [b.id for b in search_bets(feed, "DERBY")] == ["mine"]
    assert len(search_bets(feed, "yes no")) == 3
    assert len(search_bets(feed, "  ")) == 3


def test_empty_state_message() -> None:
    assert empty_state_message("myPicks") == "Join a bet to get started!"
    assert empty_state_message("all") == "No active bets found. Create a new one!"


# =========================================================================
# Validation
# =========================================================================


def _creation(**fields) -> BetCreationData:
    defaults = {
        "title": "Who wins?",
        "bet_amount": 5,
        "closing_time": to_iso_string(NOW + timedelta(days=1)),
    }
    return BetCreationData(**{**defaults, **fields})


def test_valid_creation() -> None:
    assert validate_bet_creation(_creation(), NOW).valid


@pytest.mark.parametrize(
    "fields,error",
    [
        ({"title": "ab"}, "Title must be at least 3 characters"),
        ({"title": "x" * 201}, "Title must be less than 200 characters"),
        ({"bet_amount": 0}, "Bet amount must be at least $0.01"),
        ({"bet_amount": 20000}, "Bet amount must be less than $10,000"),
        ({"closing_time": "not a date"}, "Invalid closing time"),
        ({"closing_time": to_iso_string(NOW - timedelta(minutes=1))}, "Closing time must be in the future"),
        ({"closing_time": to_iso_string(NOW + timedelta(days=31))}, "Closing time cannot be more than 30 days in the future"),
        ({"type": "OVER_UNDER"}, "Over/Under bets require a line value"),
        ({"type": "OVER_UNDER", "line": 75}, "Line must end in 0.5 (e.g., 75.5)"),
    ],
)
def test_invalid_creation(fields: dict, error: str) -> None:
    result = validate_bet_creation(_creation(**fields), NOW)

    assert not result.valid
    assert result.error == error


def test_over_under_half_point_line_is_valid() -> None:
    assert validate_bet_creation(_creation(type="OVER_UNDER", line=75.5), NOW).valid


def test_deletion_rules() -> None:
    bet = _bet(creator_id="u", participants=["u", "v"])

    assert not validate_bet_deletion(bet, "v").valid
    allowed = validate_bet_deletion(bet, "u")
    assert allowed.valid
    assert "2 people have placed bets" in allowed.error


def test_judging_rules() -> None:
    open_bet = _bet(creator_id="u", closing_at=to_iso_string(NOW + timedelta(hours=1)))
    assert validate_bet_judging(open_bet, "u", NOW).error == "Bet must be closed before judging"
    assert validate_bet_judging(open_bet, "v", NOW).error == "Only the bet creator can judge this bet"

    judged = _bet(creator_id="u", status="JUDGED")
    assert validate_bet_judging(judged, "u", NOW).error == "This bet has already been judged"

    ready = _bet(creator_id="u", status="JUDGE", closing_at=to_iso_string(NOW - timedelta(hours=1)))
    assert validate_bet_judging(ready, "u", NOW).valid


# =========================================================================
# Timing
# =========================================================================


@pytest.mark.parametrize(
    "delta,text",
    [
        (timedelta(days=1, hours=2, minutes=5), "Closes in 1d 2h"),
        (timedelta(hours=3, minutes=15), "Closes in 3h 15m"),
        (timedelta(minutes=4, seconds=30), "Closes in 4m 30s"),
        (timedelta(seconds=9), "Closes in 9s"),
    ],
)
def test_time_remaining(delta: timedelta, text: str) -> None:
    result = time_remaining(to_iso_string(NOW + delta), NOW)

    assert result.text == text
    assert not result.is_closed


def test_time_remaining_closed_and_missing() -> None:
    assert time_remaining(NOW - timedelta(seconds=1), NOW).text == "CLOSED"
    assert time_remaining(None, NOW).text == "No close time"


def test_live_percentages() -> None:
    bet = _bet(picks={"a": "YES", "b": "NO", "c": "OVER"})
    result = live_percentages(bet)

    assert (result.yes, result.no) == (67, 33)
    assert live_percentages(_bet()).yes == 0
