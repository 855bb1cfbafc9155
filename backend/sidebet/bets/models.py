"""Bet document model.

Field names follow the Firestore documents written by the web client
(camelCase). Python code uses snake_case attributes; ``to_document()`` restores
the stored names.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Known values. Stored bets also carry others ("yesno", "active"), so the
# model fields take any string.
BetStatus = Literal["OPEN", "CLOSED", "JUDGE", "VOID", "JUDGED"]
BetType = Literal["YES_NO", "OVER_UNDER", "CLOSEST_GUESS"]

# Pick values are "YES"/"NO", "OVER"/"UNDER" or a numeric guess
PickValue = str | float | int | None


class Bet(BaseModel):
    """A wager among a fixed set of participants."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    title: str = ""
    description: str = ""
    type: str = "YES_NO"
    status: str = "OPEN"
    line: float | None = None
    per_user_wager: float | None = Field(
        default=None,
        alias="perUserWager",
        validation_alias=AliasChoices("perUserWager", "wagerAmount", "per_user_wager"),
    )
    participants: list[str] = Field(default_factory=list)
    picks: dict[str, PickValue] = Field(default_factory=dict)
    creator_id: str | None = Field(default=None, alias="creatorId")
    group_id: str | None = Field(default=None, alias="groupId")
    created_at: datetime | str | None = Field(default=None, alias="createdAt")
    updated_at: datetime | str | None = Field(default=None, alias="updatedAt")
    closing_at: datetime | str | None = Field(default=None, alias="closingAt")

    # Outcome
    winner_id: str | None = Field(default=None, alias="winnerId")
    winners: list[str] | None = None
    correct_answer: str | float | None = Field(default=None, alias="correctAnswer")
    judged_at: datetime | str | None = Field(default=None, alias="judgedAt")
    payout_per_winner: float | None = Field(default=None, alias="payoutPerWinner")
    total_pot: float | None = Field(default=None, alias="totalPot")

    # Head-to-head challenges
    bet_theme: str | None = Field(default=None, alias="betTheme")
    friend_id: str | None = Field(default=None, alias="friendId")

    closing_soon_notified: bool = Field(default=False, alias="closingSoonNotified")

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Bet":
        """Build a Bet from a stored document and its id."""
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """Serialize back to stored field names, without the id."""
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"id"})

    @property
    def pot(self) -> float:
        """Full pot: the stored total, or wager times participant count."""
        if self.total_pot is not None:
            return self.total_pot
        return (self.per_user_wager or 0.0) * len(self.participants)

    def has_pick(self, user_id: str) -> bool:
        """True if the user registered a pick. A numeric 0 counts as a pick."""
        value = self.picks.get(user_id)
        return value is not None and value != ""
