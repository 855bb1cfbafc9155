"""Notification records and dispatch results.

Two notification families share the ``notifications`` collection:

- ``NotificationType``: written by the database triggers (uppercase tags,
  ``isRead`` flag, no title/message).
- ``PanelNotificationType``: written by the client helpers and read by the
  notification panel (lowercase tags, ``read`` flag, title/message/link).

They are kept apart on purpose; see DESIGN.md.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationType(str, Enum):
    """Tags written by the database triggers."""

    FRIEND_REQUEST = "FRIEND_REQUEST"
    CHALLENGE_REQUEST = "CHALLENGE_REQUEST"
    CLOSE_SOON = "CLOSE_SOON"
    WON = "WON"
    LOST = "LOST"
    PAYMENT_REQUEST = "PAYMENT_REQUEST"


class PanelNotificationType(str, Enum):
    """Tags written by the client helpers for the notification panel."""

    FRIEND_REQUEST = "friend_request"
    H2H_CHALLENGE = "h2h_challenge"
    BET_RESULT = "bet_result"
    BET_CLOSING = "bet_closing"
    ACTIVITY = "activity"
    GROUP_BET_CREATED = "group_bet_created"
    GROUP_INVITE = "group_invite"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationRecord(BaseModel):
    """Trigger-family notification document."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    user_id: str = Field(alias="userId")
    type: NotificationType
    sender_name: str | None = Field(default=None, alias="senderName")
    sender_id: str | None = Field(default=None, alias="senderId")
    bet_title: str | None = Field(default=None, alias="betTitle")
    bet_id: str | None = Field(default=None, alias="betId")
    amount: float | None = None
    friend_request_id: str | None = Field(default=None, alias="friendRequestId")
    is_read: bool = Field(default=False, alias="isRead")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    def to_document(self) -> dict[str, Any]:
        """Stored field names; unset optional references are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class PanelNotification(BaseModel):
    """Panel-family notification document."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    user_id: str = Field(alias="userId")
    type: PanelNotificationType
    title: str
    message: str
    link: str | None = None
    from_user_id: str | None = Field(default=None, alias="fromUserId")
    from_user_name: str | None = Field(default=None, alias="fromUserName")
    bet_id: str | None = Field(default=None, alias="betId")
    bet_title: str | None = Field(default=None, alias="betTitle")
    friendship_id: str | None = Field(default=None, alias="friendshipId")
    group_id: str | None = Field(default=None, alias="groupId")
    group_name: str | None = Field(default=None, alias="groupName")
    amount: float | None = None
    read: bool = False
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")

    def to_document(self) -> dict[str, Any]:
        """Stored field names; unset optional references are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class DispatchResult(BaseModel):
    """What one trigger invocation did."""

    trigger: str
    notifications: list[NotificationRecord] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)  # recipient ids
    skipped_reason: str | None = None

    @property
    def sent(self) -> int:
        """Number of notifications written."""
        return len(self.notifications)

    def merge(self, other: "DispatchResult") -> None:
        """Fold another result into this one (used by the sweep)."""
        self.notifications.extend(other.notifications)
        self.failed.extend(other.failed)

    def __str__(self) -> str:
        """Human-readable status."""
        if self.skipped_reason:
            return f"{self.trigger}: skipped ({self.skipped_reason})"
        return f"{self.trigger}: {self.sent} sent, {len(self.failed)} failed"
