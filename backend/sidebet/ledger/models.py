"""Balance and ledger models."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

IntegrityPolicy = Literal["skip", "reject"]


class BetContribution(BaseModel):
    """One bet's signed share of a counterparty balance."""

    bet_id: str
    bet_title: str
    amount: float


class CounterpartyBalance(BaseModel):
    """Net amount between the current user and one counterparty.

    Positive: the counterparty owes the current user.
    Negative: the current user owes the counterparty.
    """

    user_id: str
    amount: float = 0.0
    bets: list[BetContribution] = Field(default_factory=list)


class BalanceAnomaly(BaseModel):
    """A closed bet left out of the totals."""

    bet_id: str
    reason: str


class BalanceSummary(BaseModel):
    """Balances view for one user."""

    user_id: str
    owed_to_you: list[CounterpartyBalance] = Field(default_factory=list)
    you_owe: list[CounterpartyBalance] = Field(default_factory=list)
    net_balance: float = 0.0
    anomalies: list[BalanceAnomaly] = Field(default_factory=list)

    def counterparty(self, user_id: str) -> CounterpartyBalance | None:
        """Find a counterparty in either list."""
        for balance in self.owed_to_you + self.you_owe:
            if balance.user_id == user_id:
                return balance
        return None


class LedgerEntry(BaseModel):
    """Money one user owes another after a bet closed."""

    from_user_id: str  # owes
    to_user_id: str  # is owed
    amount: float
    bet_id: str
    bet_title: str
    group_id: str | None = None
    settled: bool = False
    settled_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
