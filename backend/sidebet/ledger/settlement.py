"""Ledger entries for closed bets and settlement (payment) requests."""

import logging
from datetime import datetime, timezone

from sidebet.bets.models import Bet
from sidebet.storage.base import COLLECTION_SETTLEMENTS, DocumentStore

from .aggregator import check_integrity
from .exceptions import LedgerIntegrityError, SettlementError
from .models import CounterpartyBalance, LedgerEntry

logger = logging.getLogger(__name__)


def ledger_entries_for_bet(bet: Bet, now: datetime | None = None) -> list[LedgerEntry]:
    """One entry per loser owing the winner the wager on a closed bet.

    Raises:
        LedgerIntegrityError: the bet is not CLOSED or cannot be attributed
    """
    if bet.status != "CLOSED":
        raise LedgerIntegrityError(
            f"Bet {bet.id} is {bet.status}, only CLOSED bets produce ledger entries",
            bet_id=bet.id,
        )

    reason = check_integrity(bet)
    if reason is not None:
        raise LedgerIntegrityError(f"Bet {bet.id}: {reason}", bet_id=bet.id)

    created_at = now or datetime.now(timezone.utc)
    return [
        LedgerEntry(
            from_user_id=loser,
            to_user_id=bet.winner_id,
            amount=bet.per_user_wager,
            bet_id=bet.id,
            bet_title=bet.title,
            group_id=bet.group_id,
            created_at=created_at,
        )
        for loser in dict.fromkeys(bet.participants)
        if loser != bet.winner_id
    ]


def request_settlement(
    store: DocumentStore,
    balance: CounterpartyBalance,
    requester_id: str,
    now: datetime | None = None,
) -> str:
    """Ask a counterparty who owes ``requester_id`` to pay up.

    Writes a ``settlements`` document; its creation fires the payment
    request notification.

    Returns:
        The new settlement document id

    Raises:
        SettlementError: the counterparty does not owe the requester anything
    """
    if balance.amount <= 0:
        raise SettlementError(
            f"{balance.user_id} does not owe {requester_id} anything"
        )

    document = {
        "requesterId": requester_id,
        "payerId": balance.user_id,
        "amount": balance.amount,
        "status": "PENDING",
        "createdAt": now or datetime.now(timezone.utc),
    }
    # Bet references only when the request covers a single bet
    if len(balance.bets) == 1:
        document["betId"] = balance.bets[0].bet_id
        document["betTitle"] = balance.bets[0].bet_title

    settlement_id = store.add(COLLECTION_SETTLEMENTS, document)
    logger.info(
        f"Settlement {settlement_id}: {balance.user_id} owes {requester_id} "
        f"${balance.amount:.2f}"
    )
    return settlement_id
