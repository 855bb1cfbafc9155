"""Net settlement between the current user and everyone they bet against.

Only CLOSED bets count. On each one every loser owes the winner the flat
per-participant wager. From the current user's side that means:

- the user lost: ``-wager`` against the winner
- the user won: ``+wager`` against every loser

Totals are recomputed from scratch on every call; nothing is persisted.
"""

import logging
from typing import Iterable

from sidebet.bets.models import Bet

from .exceptions import LedgerIntegrityError
from .models import (
    BalanceAnomaly,
    BalanceSummary,
    BetContribution,
    CounterpartyBalance,
    IntegrityPolicy,
)

logger = logging.getLogger(__name__)


def check_integrity(bet: Bet) -> str | None:
    """Reason a closed bet cannot be attributed, or None if it is sound."""
    if not bet.winner_id:
        return "closed bet has no winnerId"
    if bet.winner_id not in bet.participants:
        return f"winner {bet.winner_id} is not a participant"
    if bet.per_user_wager is None:
        return "closed bet has no wager amount"
    if bet.per_user_wager < 0:
        return f"negative wager {bet.per_user_wager}"
    return None


def _record(
    totals: dict[str, CounterpartyBalance],
    counterparty: str,
    bet: Bet,
    amount: float,
) -> None:
    balance = totals.get(counterparty)
    if balance is None:
        balance = totals[counterparty] = CounterpartyBalance(user_id=counterparty)
    balance.amount += amount
    balance.bets.append(
        BetContribution(bet_id=bet.id, bet_title=bet.title, amount=amount)
    )


def compute_balances(
    bets: Iterable[Bet],
    user_id: str,
    integrity_policy: IntegrityPolicy = "skip",
) -> BalanceSummary:
    """Build the owed-to-you / you-owe view for ``user_id``.

    Args:
        bets: The user's bets in any status and any order
        user_id: The current user
        integrity_policy: ``skip`` leaves malformed closed bets out and lists
            them in ``anomalies``; ``reject`` raises on the first one

    Returns:
        BalanceSummary. Counterparties whose total is exactly zero are in
        neither list. List order follows first encounter in ``bets``.

    Raises:
        LedgerIntegrityError: malformed closed bet under the ``reject`` policy
    """
    totals: dict[str, CounterpartyBalance] = {}
    anomalies: list[BalanceAnomaly] = []

    for bet in bets:
        if bet.status != "CLOSED":
            continue

        reason = check_integrity(bet)
        if reason is not None:
            if integrity_policy == "reject":
                raise LedgerIntegrityError(f"Bet {bet.id}: {reason}", bet_id=bet.id)
            logger.warning(f"Skipping bet {bet.id} in balances: {reason}")
            anomalies.append(BalanceAnomaly(bet_id=bet.id, reason=reason))
            continue

        wager = bet.per_user_wager
        winner = bet.winner_id
        # Duplicate participant entries count once
        losers = [p for p in dict.fromkeys(bet.participants) if p != winner]

        for loser in losers:
            if loser == user_id:
                _record(totals, winner, bet, -wager)
            elif winner == user_id:
                _record(totals, loser, bet, wager)

    owed_to_you = [b for b in totals.values() if b.amount > 0]
    you_owe = [b for b in totals.values() if b.amount < 0]

    return BalanceSummary(
        user_id=user_id,
        owed_to_you=owed_to_you,
        you_owe=you_owe,
        net_balance=sum(b.amount for b in totals.values()),
        anomalies=anomalies,
    )
