"""Ledger exceptions."""


class LedgerError(Exception):
    """Base ledger exception."""

    pass


class LedgerIntegrityError(LedgerError):
    """A closed bet cannot be attributed (winner not a participant, no wager)."""

    def __init__(self, message: str, bet_id: str):
        super().__init__(message)
        self.bet_id = bet_id


class SettlementError(LedgerError):
    """A settlement request cannot be created."""

    pass
