"""Balances between friends, derived from closed bets."""

from .aggregator import check_integrity, compute_balances
from .exceptions import LedgerError, LedgerIntegrityError, SettlementError
from .loader import load_balances
from .models import (
    BalanceAnomaly,
    BalanceSummary,
    BetContribution,
    CounterpartyBalance,
    IntegrityPolicy,
    LedgerEntry,
)
from .settlement import ledger_entries_for_bet, request_settlement

__all__ = [
    "compute_balances",
    "load_balances",
    "check_integrity",
    "ledger_entries_for_bet",
    "request_settlement",
    "BalanceAnomaly",
    "BalanceSummary",
    "BetContribution",
    "CounterpartyBalance",
    "IntegrityPolicy",
    "LedgerEntry",
    "LedgerError",
    "LedgerIntegrityError",
    "SettlementError",
]
