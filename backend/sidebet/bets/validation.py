"""Validation for bet creation, deletion and judging requests."""

from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel

from sidebet.bets.models import Bet
from sidebet.bets.timing import parse_timestamp

MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 200
MIN_WAGER = 0.01
MAX_WAGER = 10000
MAX_CLOSING_WINDOW = timedelta(days=30)


class BetValidationResult(BaseModel):
    """Validation outcome. ``error`` may carry a warning on a valid result."""

    valid: bool
    error: str | None = None


class BetCreationData(BaseModel):
    """Fields submitted when creating a bet."""

    title: str
    description: str = ""
    bet_amount: float | None = None
    closing_time: Any = None
    type: str | None = None
    line: float | None = None


def _fail(error: str) -> BetValidationResult:
    return BetValidationResult(valid=False, error=error)


def is_half_point_line(line: float | None) -> bool:
    """Over/under lines must end in .5 so a push is impossible."""
    if line is None:
        return False
    return (line * 2) % 2 == 1


def validate_bet_creation(
    data: BetCreationData, now: datetime | None = None
) -> BetValidationResult:
    """Validate bet creation data before it is written."""
    now = now or datetime.now(timezone.utc)

    title = data.title.strip()
    if len(title) < MIN_TITLE_LENGTH:
        return _fail(f"Title must be at least {MIN_TITLE_LENGTH} characters")
    if len(data.title) > MAX_TITLE_LENGTH:
        return _fail(f"Title must be less than {MAX_TITLE_LENGTH} characters")

    if data.bet_amount is not None:
        if data.bet_amount < MIN_WAGER:
            return _fail("Bet amount must be at least $0.01")
        if data.bet_amount > MAX_WAGER:
            return _fail("Bet amount must be less than $10,000")

    closing = parse_timestamp(data.closing_time)
    if closing is None:
        return _fail("Invalid closing time")
    if closing <= now:
        return _fail("Closing time must be in the future")
    if closing > now + MAX_CLOSING_WINDOW:
        return _fail("Closing time cannot be more than 30 days in the future")

    if data.type == "OVER_UNDER":
        if data.line is None:
            return _fail("Over/Under bets require a line value")
        if not is_half_point_line(data.line):
            return _fail("Line must end in 0.5 (e.g., 75.5)")

    return BetValidationResult(valid=True)


def validate_bet_deletion(bet: Bet, user_id: str) -> BetValidationResult:
    """Only the creator may delete; participants get a voided-wager warning."""
    if bet.creator_id != user_id:
        return _fail("Only the bet creator can delete this bet")

    if bet.participants:
        return BetValidationResult(
            valid=True,
            error=(
                f"{len(bet.participants)} people have placed bets. "
                "Their wagers will be voided."
            ),
        )
    return BetValidationResult(valid=True)


def validate_bet_judging(
    bet: Bet, user_id: str, now: datetime | None = None
) -> BetValidationResult:
    """Only the creator may judge, and only after closing."""
    if bet.creator_id != user_id:
        return _fail("Only the bet creator can judge this bet")

    now = now or datetime.now(timezone.utc)
    closing = parse_timestamp(bet.closing_at)
    if closing is not None and now < closing:
        return _fail("Bet must be closed before judging")

    if bet.status == "JUDGED":
        return _fail("This bet has already been judged")
    if bet.status == "VOID":
        return _fail("This bet has been voided")

    return BetValidationResult(valid=True)
