"""Bet documents and the helpers the feed and judge flows use."""

from .exceptions import BetError, JudgingError
from .filters import (
    empty_state_message,
    filter_bets,
    is_closing_soon,
    search_bets,
    sort_bets,
)
from .judging import JudgeResult, LeaderboardDelta, judge_bet
from .models import Bet, BetStatus, BetType
from .timing import (
    LivePercentages,
    TimeRemaining,
    live_percentages,
    parse_timestamp,
    time_remaining,
    to_iso_string,
)
from .validation import (
    BetCreationData,
    BetValidationResult,
    validate_bet_creation,
    validate_bet_deletion,
    validate_bet_judging,
)

__all__ = [
    "Bet",
    "BetStatus",
    "BetType",
    "BetError",
    "JudgingError",
    "JudgeResult",
    "LeaderboardDelta",
    "judge_bet",
    "filter_bets",
    "sort_bets",
    "search_bets",
    "is_closing_soon",
    "empty_state_message",
    "TimeRemaining",
    "LivePercentages",
    "time_remaining",
    "live_percentages",
    "parse_timestamp",
    "to_iso_string",
    "BetCreationData",
    "BetValidationResult",
    "validate_bet_creation",
    "validate_bet_deletion",
    "validate_bet_judging",
]
