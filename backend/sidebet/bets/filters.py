"""Filter, sort and search helpers for bet lists."""

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Literal

from sidebet.bets.models import Bet
from sidebet.bets.timing import parse_timestamp

FilterTab = Literal["all", "open", "myPicks", "closingSoon"]
SortOption = Literal["closingSoon", "recent", "group", "wager"]

CLOSING_SOON_WINDOW = timedelta(hours=24)

_EMPTY_STATE_MESSAGES = {
    "open": "All caught up! Check back later.",
    "myPicks": "Join a bet to get started!",
    "closingSoon": "No urgent bets right now.",
    "all": "No active bets found. Create a new one!",
}

_FAR_FUTURE = datetime.max.replace(tzinfo=timezone.utc)
_FAR_PAST = datetime.min.replace(tzinfo=timezone.utc)


def is_closing_soon(closing_at: Any, now: datetime | None = None) -> bool:
    """True if the bet closes within the next 24 hours."""
    closes = parse_timestamp(closing_at)
    if closes is None:
        return False
    now = now or datetime.now(timezone.utc)
    until_close = closes - now
    return timedelta(0) < until_close <= CLOSING_SOON_WINDOW


def filter_bets(
    bets: Iterable[Bet],
    tab: FilterTab,
    user_id: str,
    now: datetime | None = None,
) -> list[Bet]:
    """Bets shown under a feed tab."""
    bets = list(bets)

    if tab == "open":
        return [b for b in bets if b.status == "OPEN" and user_id not in b.participants]
    if tab == "myPicks":
        return [b for b in bets if user_id in b.participants]
    if tab == "closingSoon":
        return [
            b for b in bets
            if b.status == "OPEN" and is_closing_soon(b.closing_at, now)
        ]
    return bets


def sort_bets(
    bets: Iterable[Bet],
    sort_by: SortOption,
    group_names: dict[str, str] | None = None,
) -> list[Bet]:
    """Return a sorted copy. Unknown options keep the input order."""
    bets = list(bets)

    if sort_by == "closingSoon":
        return sorted(bets, key=lambda b: parse_timestamp(b.closing_at) or _FAR_FUTURE)
    if sort_by == "recent":
        return sorted(
            bets,
            key=lambda b: parse_timestamp(b.created_at) or _FAR_PAST,
            reverse=True,
        )
    if sort_by == "group":
        names = group_names or {}
        return sorted(bets, key=lambda b: names.get(b.group_id or "", "").lower())
    if sort_by == "wager":
        return sorted(bets, key=lambda b: b.per_user_wager or 0.0, reverse=True)
    return bets


def search_bets(bets: Iterable[Bet], query: str) -> list[Bet]:
    """Case-insensitive match on title, description or bet type ("yes no")."""
    bets = list(bets)
    if not query.strip():
        return bets

    needle = query.lower()
    return [
        b for b in bets
        if needle in b.title.lower()
        or needle in b.description.lower()
        or needle in b.type.lower().replace("_", " ")
    ]


def empty_state_message(tab: FilterTab) -> str:
    """Message shown when a tab has no bets."""
    return _EMPTY_STATE_MESSAGES.get(tab, _EMPTY_STATE_MESSAGES["all"])
