"""Bet operation exceptions."""


class BetError(Exception):
    """Base bet exception."""

    def __init__(self, message: str, bet_id: str | None = None):
        super().__init__(message)
        self.bet_id = bet_id


class JudgingError(BetError):
    """Outcome could not be recorded."""

    pass
