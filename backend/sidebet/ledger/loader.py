"""Load a user's bets from the document store and compute their balances."""

import logging

from pydantic import ValidationError

from sidebet.bets.models import Bet
from sidebet.storage.base import COLLECTION_BETS, DocumentStore

from .aggregator import compute_balances
from .exceptions import LedgerIntegrityError
from .models import BalanceAnomaly, BalanceSummary, IntegrityPolicy

logger = logging.getLogger(__name__)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "document"
    return f"unreadable bet document ({field}: {first['msg']})"


def load_balances(
    store: DocumentStore,
    user_id: str,
    integrity_policy: IntegrityPolicy = "skip",
) -> BalanceSummary:
    """Balances for ``user_id`` over every bet they take part in.

    A CLOSED bet document that cannot be read goes through the integrity
    policy like any other malformed closed bet. Unreadable bets in other
    statuses could not change the result and are only logged.

    Raises:
        LedgerIntegrityError: malformed closed bet under the ``reject`` policy
    """
    bets: list[Bet] = []
    unreadable: list[BalanceAnomaly] = []

    docs = store.query(COLLECTION_BETS, [("participants", "array-contains", user_id)])
    for doc in docs:
        try:
            bets.append(Bet.from_document(doc.id, doc.data))
        except ValidationError as e:
            reason = _describe(e)
            if doc.data.get("status") != "CLOSED":
                logger.debug(f"Ignoring bet {doc.id}: {reason}")
                continue
            if integrity_policy == "reject":
                raise LedgerIntegrityError(f"Bet {doc.id}: {reason}", bet_id=doc.id) from e
            logger.warning(f"Skipping bet {doc.id} in balances: {reason}")
            unreadable.append(BalanceAnomaly(bet_id=doc.id, reason=reason))

    summary = compute_balances(bets, user_id, integrity_policy=integrity_policy)
    summary.anomalies = unreadable + summary.anomalies
    return summary
