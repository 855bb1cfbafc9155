"""Cloud Functions entry points (Gen2, Python).

Each function unpacks the Firestore event and hands the document data to
the NotificationDispatcher. The ``_handle_*`` functions hold the logic so
they can be called without the Functions runtime.
"""

import logging
from functools import lru_cache
from typing import Any

from firebase_functions import firestore_fn, options, scheduler_fn

from sidebet.config import get_settings
from sidebet.notifications import DispatchResult, NotificationDispatcher

logger = logging.getLogger(__name__)

options.set_global_options(region="us-central1")


@lru_cache()
def get_dispatcher() -> NotificationDispatcher:
    """Dispatcher bound to Firestore, created once per instance."""
    from sidebet.storage.firestore import FirestoreStore

    settings = get_settings()
    return NotificationDispatcher(
        FirestoreStore(settings.firebase), settings.notifications
    )


def _snapshot_data(snapshot: Any) -> dict[str, Any] | None:
    if snapshot is None:
        return None
    return snapshot.to_dict()


def _handle_bet_updated(event: Any, dispatcher: NotificationDispatcher) -> DispatchResult:
    bet_id = event.params["betId"]
    before = _snapshot_data(event.data.before) or {}
    after = _snapshot_data(event.data.after) or {}
    return dispatcher.on_bet_updated(bet_id, before, after)


def _handle_bet_created(event: Any, dispatcher: NotificationDispatcher) -> DispatchResult:
    data = _snapshot_data(event.data)
    if data is None:
        return DispatchResult(trigger="challenge_request", skipped_reason="no data")
    return dispatcher.on_bet_created(event.params["betId"], data)


def _handle_friend_request_created(
    event: Any, dispatcher: NotificationDispatcher
) -> DispatchResult:
    data = _snapshot_data(event.data)
    if data is None:
        return DispatchResult(trigger="friend_request", skipped_reason="no data")
    return dispatcher.on_friend_request_created(event.params["requestId"], data)


def _handle_settlement_created(
    event: Any, dispatcher: NotificationDispatcher
) -> DispatchResult:
    data = _snapshot_data(event.data)
    if data is None:
        return DispatchResult(trigger="payment_request", skipped_reason="no data")
    return dispatcher.on_settlement_created(event.params["settlementId"], data)


@firestore_fn.on_document_updated(document="bets/{betId}")
def on_bet_closed(
    event: firestore_fn.Event[firestore_fn.Change[firestore_fn.DocumentSnapshot | None]],
) -> None:
    logger.info(str(_handle_bet_updated(event, get_dispatcher())))


@firestore_fn.on_document_created(document="bets/{betId}")
def on_h2h_bet_created(
    event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None],
) -> None:
    logger.info(str(_handle_bet_created(event, get_dispatcher())))


@firestore_fn.on_document_created(document="friendRequests/{requestId}")
def on_friend_request_created(
    event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None],
) -> None:
    logger.info(str(_handle_friend_request_created(event, get_dispatcher())))


@firestore_fn.on_document_created(document="settlements/{settlementId}")
def on_payment_requested(
    event: firestore_fn.Event[firestore_fn.DocumentSnapshot | None],
) -> None:
    logger.info(str(_handle_settlement_created(event, get_dispatcher())))


@scheduler_fn.on_schedule(schedule="every 1 hours")
def check_closing_soon_bets(event: scheduler_fn.ScheduledEvent) -> None:
    logger.info(str(get_dispatcher().sweep_closing_soon()))
