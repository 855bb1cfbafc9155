"""Timestamp helpers, countdown text and live pick percentages."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from sidebet.bets.models import Bet


class TimeRemaining(BaseModel):
    """Countdown shown on a bet card."""

    text: str
    is_closed: bool


class LivePercentages(BaseModel):
    """Share of YES/OVER picks versus the rest, in whole percent."""

    yes: int
    no: int


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a stored timestamp (ISO string or datetime) into an aware datetime.

    Returns None for missing or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso_string(moment: datetime) -> str:
    """Format as the web client does: UTC, millisecond precision, 'Z' suffix.

    Stored ``closingAt`` values are compared as strings, so the format must match.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def time_remaining(closing_at: Any, now: datetime | None = None) -> TimeRemaining:
    """Countdown text until a bet closes."""
    closes = parse_timestamp(closing_at)
    if closes is None:
        return TimeRemaining(text="No close time", is_closed=False)

    now = now or datetime.now(timezone.utc)
    diff = (closes - now).total_seconds()
    if diff <= 0:
        return TimeRemaining(text="CLOSED", is_closed=True)

    total = int(diff)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    if days > 0:
        text = f"{days}d {hours}h"
    elif hours > 0:
        text = f"{hours}h {minutes}m"
    elif minutes > 0:
        text = f"{minutes}m {seconds}s"
    else:
        text = f"{seconds}s"

    return TimeRemaining(text=f"Closes in {text}", is_closed=False)


def live_percentages(bet: Bet) -> LivePercentages:
    """YES/OVER share of the registered picks."""
    values = [v for v in bet.picks.values() if v is not None]
    if not values:
        return LivePercentages(yes=0, no=0)

    yes_count = sum(1 for v in values if v in ("YES", "OVER"))
    total = len(values)
    # Half-up rounding, matching the client
    yes = int(yes_count * 100 / total + 0.5)
    no = int((total - yes_count) * 100 / total + 0.5)
    return LivePercentages(yes=yes, no=no)
