"""Judging: pick winners, split the pot and compute leaderboard deltas."""

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from sidebet.bets.exceptions import JudgingError
from sidebet.bets.models import Bet
from sidebet.bets.timing import to_iso_string

logger = logging.getLogger(__name__)


class LeaderboardDelta(BaseModel):
    """Change to one participant's group leaderboard row."""

    user_id: str
    group_id: str | None
    balance: float
    wins: int
    losses: int
    total_bets: int = 1

    @property
    def document_id(self) -> str:
        """Leaderboard documents are keyed ``{groupId}_{userId}``."""
        return f"{self.group_id}_{self.user_id}"


class JudgeResult(BaseModel):
    """Outcome of judging a bet."""

    bet_id: str
    correct_answer: str | float
    winners: list[str]
    total_pot: float
    payout_per_winner: float
    judged_at: datetime
    leaderboard: list[LeaderboardDelta] = Field(default_factory=list)

    def bet_updates(self) -> dict[str, Any]:
        """Field updates to write onto the bet document."""
        return {
            "status": "JUDGED",
            "correctAnswer": self.correct_answer,
            "winners": self.winners,
            "judgedAt": to_iso_string(self.judged_at),
            "payoutPerWinner": self.payout_per_winner,
        }


def _to_number(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _closest_guess_winners(bet: Bet, answer: Any) -> tuple[list[str], float]:
    actual = _to_number(answer)
    if actual is None:
        raise JudgingError("Please enter a valid number", bet_id=bet.id)

    guesses: list[tuple[str, float]] = []
    for user_id, guess in bet.picks.items():
        value = _to_number(guess)
        if value is None:
            logger.warning(f"Ignoring non-numeric guess from {user_id} on bet {bet.id}")
            continue
        guesses.append((user_id, abs(value - actual)))

    if not guesses:
        raise JudgingError("No guesses to judge!", bet_id=bet.id)

    min_diff = min(diff for _, diff in guesses)
    return [user_id for user_id, diff in guesses if diff == min_diff], actual


def judge_bet(bet: Bet, answer: Any, now: datetime | None = None) -> JudgeResult:
    """Record an outcome for a bet.

    YES_NO and OVER_UNDER winners are the users whose pick equals the answer.
    CLOSEST_GUESS winners are the users with the smallest distance to the
    numeric answer; ties share the pot.

    Raises:
        JudgingError: non-numeric answer or no guesses on a CLOSEST_GUESS bet
    """
    if bet.type == "CLOSEST_GUESS":
        winners, correct = _closest_guess_winners(bet, answer)
    else:
        winners = [user_id for user_id, pick in bet.picks.items() if pick == answer]
        correct = answer

    wager = bet.per_user_wager or 0.0
    total_pot = wager * len(bet.participants)
    payout = total_pot / len(winners) if winners else 0.0

    leaderboard = []
    for user_id in bet.participants:
        is_winner = user_id in winners
        leaderboard.append(
            LeaderboardDelta(
                user_id=user_id,
                group_id=bet.group_id,
                balance=payout if is_winner else -wager,
                wins=1 if is_winner else 0,
                losses=0 if is_winner else 1,
            )
        )

    logger.info(
        f"Judged bet {bet.id}: {len(winners)} winner(s), ${payout:.2f} each"
    )

    return JudgeResult(
        bet_id=bet.id,
        correct_answer=correct,
        winners=winners,
        total_pot=total_pot,
        payout_per_winner=payout,
        judged_at=now or datetime.now(timezone.utc),
        leaderboard=leaderboard,
    )
