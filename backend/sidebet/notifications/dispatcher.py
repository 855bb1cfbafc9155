"""Notification fan-out for database events.

Each ``on_*`` method handles one document event and appends notification
records. Triggers are delivered at least once, so when dedupe is enabled
every event first claims a key in ``notificationKeys``; a redelivered event
finds the key taken and writes nothing.

Failed appends are logged and reported in the result, never retried.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from pydantic import ValidationError

from sidebet.bets.models import Bet
from sidebet.bets.timing import to_iso_string
from sidebet.config import NotificationConfig
from sidebet.storage.base import (
    COLLECTION_BETS,
    COLLECTION_NOTIFICATION_KEYS,
    COLLECTION_NOTIFICATIONS,
    COLLECTION_USERS,
    DocumentStore,
)

from .exceptions import NotificationLookupError, NotificationWriteError
from .models import DispatchResult, NotificationRecord, NotificationType

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NotificationDispatcher:
    """Turns document lifecycle events into notification records."""

    def __init__(
        self,
        store: DocumentStore,
        config: NotificationConfig | None = None,
        clock: Clock = _utcnow,
    ):
        self.store = store
        self.config = config or NotificationConfig()
        self._clock = clock

    # =========================================================================
    # Collaborator helpers
    # =========================================================================

    def _load_user(self, user_id: str) -> dict[str, Any] | None:
        try:
            return self.store.get(COLLECTION_USERS, user_id)
        except Exception as e:
            raise NotificationLookupError(f"Failed to read user {user_id}: {e}") from e

    def display_name(self, user_id: str | None) -> str:
        """Display name for a user, or the configured fallback."""
        fallback = self.config.fallback_sender_name
        if not user_id:
            return fallback

        try:
            user = self._load_user(user_id)
        except NotificationLookupError as e:
            logger.warning(str(e))
            return fallback

        if not user:
            return fallback
        if user.get("displayName"):
            return user["displayName"]
        full_name = f"{user.get('firstName') or ''} {user.get('lastName') or ''}".strip()
        return full_name or user.get("email") or fallback

    def _append(self, record: NotificationRecord) -> str:
        try:
            return self.store.add(COLLECTION_NOTIFICATIONS, record.to_document())
        except Exception as e:
            raise NotificationWriteError(
                f"Failed to append {record.type} notification: {e}",
                recipient=record.user_id,
            ) from e

    def _notify(self, result: DispatchResult, **fields: Any) -> None:
        record = NotificationRecord(created_at=self._clock(), **fields)
        try:
            doc_id = self._append(record)
        except NotificationWriteError as e:
            logger.error(f"{result.trigger}: {e}")
            result.failed.append(e.recipient)
            return

        logger.info(f"{result.trigger}: {record.type} -> {record.user_id} ({doc_id})")
        result.notifications.append(record)

    def _claim(self, key: str, trigger: str) -> bool:
        """Check-and-set a dedupe key. False if the event was already handled."""
        if not self.config.dedupe:
            return True

        claimed = self.store.create(
            COLLECTION_NOTIFICATION_KEYS,
            key,
            {"trigger": trigger, "createdAt": self._clock()},
        )
        if not claimed:
            logger.info(f"{trigger}: {key} already handled, skipping")
        return claimed

    @staticmethod
    def _parse_bet(bet_id: str, data: dict[str, Any], result: DispatchResult) -> Bet | None:
        try:
            return Bet.from_document(bet_id, data)
        except ValidationError as e:
            logger.warning(f"{result.trigger}: bet {bet_id} is malformed: {e}")
            result.skipped_reason = "malformed bet document"
            return None

    # =========================================================================
    # Triggers
    # =========================================================================

    def on_bet_updated(
        self, bet_id: str, before: dict[str, Any], after: dict[str, Any]
    ) -> DispatchResult:
        """Bet moved to CLOSED: WON to the winner, LOST to everyone else."""
        result = DispatchResult(trigger="bet_closed")

        if before.get("status") == "CLOSED" or after.get("status") != "CLOSED":
            result.skipped_reason = "not a transition to CLOSED"
            return result

        bet = self._parse_bet(bet_id, after, result)
        if bet is None:
            return result

        if not bet.winner_id:
            logger.warning(f"bet_closed: bet {bet_id} closed without a winnerId")
            result.skipped_reason = "missing winnerId"
            return result
        if bet.winner_id not in bet.participants:
            logger.warning(
                f"bet_closed: winner {bet.winner_id} is not a participant of {bet_id}"
            )
            result.skipped_reason = "winner not a participant"
            return result

        if not self._claim(f"bet:{bet_id}:CLOSED", result.trigger):
            result.skipped_reason = "already notified"
            return result

        winner_name = self.display_name(bet.winner_id)

        self._notify(
            result,
            user_id=bet.winner_id,
            type=NotificationType.WON,
            bet_title=bet.title,
            bet_id=bet_id,
            amount=bet.pot,
        )

        for loser_id in dict.fromkeys(bet.participants):
            if loser_id == bet.winner_id:
                continue
            self._notify(
                result,
                user_id=loser_id,
                type=NotificationType.LOST,
                bet_title=bet.title,
                bet_id=bet_id,
                amount=bet.per_user_wager,
                sender_name=winner_name,
            )

        return result

    def sweep_closing_soon(self, now: datetime | None = None) -> DispatchResult:
        """Warn participants without a pick about bets closing within the window.

        Each bet is flagged ``closingSoonNotified`` so later sweeps skip it.
        """
        result = DispatchResult(trigger="closing_soon")
        now = now or self._clock()
        cutoff = now + timedelta(minutes=self.config.closing_soon_window_minutes)

        docs = self.store.query(
            COLLECTION_BETS,
            [
                ("status", "==", "OPEN"),
                ("closingAt", "<=", to_iso_string(cutoff)),
                ("closingSoonNotified", "==", False),
            ],
        )
        logger.info(f"closing_soon: {len(docs)} bet(s) closing before {cutoff:%Y-%m-%d %H:%M}")

        for doc in docs:
            bet_result = DispatchResult(trigger=result.trigger)
            bet = self._parse_bet(doc.id, doc.data, bet_result)
            if bet is None:
                continue

            if self._claim(f"bet:{doc.id}:CLOSE_SOON", result.trigger):
                for user_id in dict.fromkeys(bet.participants):
                    if bet.has_pick(user_id):
                        continue
                    self._notify(
                        bet_result,
                        user_id=user_id,
                        type=NotificationType.CLOSE_SOON,
                        bet_title=bet.title,
                        bet_id=doc.id,
                    )

            self.store.update(COLLECTION_BETS, doc.id, {"closingSoonNotified": True})
            result.merge(bet_result)

        return result

    def on_friend_request_created(
        self, request_id: str, data: dict[str, Any]
    ) -> DispatchResult:
        """FRIEND_REQUEST to the receiver."""
        result = DispatchResult(trigger="friend_request")

        receiver_id = data.get("receiverId")
        sender_id = data.get("senderId")
        if not receiver_id:
            result.skipped_reason = "missing receiverId"
            return result

        if not self._claim(f"friendRequest:{request_id}", result.trigger):
            result.skipped_reason = "already notified"
            return result

        self._notify(
            result,
            user_id=receiver_id,
            type=NotificationType.FRIEND_REQUEST,
            sender_name=self.display_name(sender_id),
            sender_id=sender_id,
            friend_request_id=request_id,
        )
        return result

    def on_bet_created(self, bet_id: str, data: dict[str, Any]) -> DispatchResult:
        """Head-to-head bet: CHALLENGE_REQUEST to the challenged friend."""
        result = DispatchResult(trigger="challenge_request")

        bet = self._parse_bet(bet_id, data, result)
        if bet is None:
            return result

        if bet.bet_theme != "friend" or not bet.friend_id:
            result.skipped_reason = "not a head-to-head bet"
            return result

        if not self._claim(f"challenge:{bet_id}", result.trigger):
            result.skipped_reason = "already notified"
            return result

        self._notify(
            result,
            user_id=bet.friend_id,
            type=NotificationType.CHALLENGE_REQUEST,
            sender_name=self.display_name(bet.creator_id),
            sender_id=bet.creator_id,
            bet_title=bet.title,
            bet_id=bet_id,
        )
        return result

    def on_settlement_created(
        self, settlement_id: str, data: dict[str, Any]
    ) -> DispatchResult:
        """PAYMENT_REQUEST to the payer."""
        result = DispatchResult(trigger="payment_request")

        payer_id = data.get("payerId")
        requester_id = data.get("requesterId")
        if not payer_id:
            result.skipped_reason = "missing payerId"
            return result

        if not self._claim(f"settlement:{settlement_id}", result.trigger):
            result.skipped_reason = "already notified"
            return result

        self._notify(
            result,
            user_id=payer_id,
            type=NotificationType.PAYMENT_REQUEST,
            sender_name=self.display_name(requester_id),
            sender_id=requester_id,
            bet_title=data.get("betTitle"),
            bet_id=data.get("betId"),
            amount=data.get("amount"),
        )
        return result
