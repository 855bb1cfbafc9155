"""Builders for panel-family notifications (title, message and link)."""

import logging

from sidebet.storage.base import COLLECTION_NOTIFICATIONS, DocumentStore

from .models import PanelNotification, PanelNotificationType

logger = logging.getLogger(__name__)


def publish(store: DocumentStore, notification: PanelNotification) -> str:
    """Append a panel notification and return its id."""
    try:
        doc_id = store.add(COLLECTION_NOTIFICATIONS, notification.to_document())
    except Exception as e:
        logger.error(f"Error creating notification: {e}")
        raise

    logger.info(f"Notification created for user {notification.user_id}: {notification.title}")
    return doc_id


def friend_request(recipient_id: str, sender_name: str, friendship_id: str) -> PanelNotification:
    """Incoming friend request, linking to the friends page."""
    return PanelNotification(
        user_id=recipient_id,
        type=PanelNotificationType.FRIEND_REQUEST,
        title="New Friend Request",
        message=f"{sender_name} sent you a friend request",
        link="/friends",
        from_user_name=sender_name,
        friendship_id=friendship_id,
    )


def h2h_challenge(
    challengee_id: str, challenger_name: str, bet_id: str, bet_title: str
) -> PanelNotification:
    """Head-to-head challenge from a friend."""
    return PanelNotification(
        user_id=challengee_id,
        type=PanelNotificationType.H2H_CHALLENGE,
        title="New Challenge!",
        message=f'{challenger_name} challenged you: "{bet_title}"',
        link=f"/bets/{bet_id}",
        from_user_name=challenger_name,
        bet_id=bet_id,
        bet_title=bet_title,
    )


def bet_result(
    user_id: str,
    bet_id: str,
    bet_title: str,
    won: bool,
    amount: float | None = None,
) -> PanelNotification:
    """Outcome of a judged bet: a win with the payout, or a neutral resolution."""
    if won:
        title = "You Won!"
        message = f'You won ${amount or 0:g} on "{bet_title}"!'
    else:
        title = "Bet Resolved"
        message = f'"{bet_title}" has been resolved'

    return PanelNotification(
        user_id=user_id,
        type=PanelNotificationType.BET_RESULT,
        title=title,
        message=message,
        link=f"/bets/{bet_id}",
        bet_id=bet_id,
        bet_title=bet_title,
        amount=amount,
    )


def bet_closing_soon(user_id: str, bet_id: str, bet_title: str) -> PanelNotification:
    """Reminder that a bet closes within the hour."""
    return PanelNotification(
        user_id=user_id,
        type=PanelNotificationType.BET_CLOSING,
        title="Bet Closing Soon!",
        message=f'"{bet_title}" closes in 1 hour',
        link=f"/bets/{bet_id}",
        bet_id=bet_id,
        bet_title=bet_title,
    )


def friend_request_accepted(user_id: str, friend_name: str) -> PanelNotification:
    """Activity entry for an accepted friend request."""
    return PanelNotification(
        user_id=user_id,
        type=PanelNotificationType.ACTIVITY,
        title="Friend Request Accepted",
        message=f"{friend_name} accepted your friend request",
        link="/friends",
        from_user_name=friend_name,
    )


def group_bet_created(
    user_id: str,
    creator_name: str,
    bet_id: str,
    bet_title: str,
    group_name: str,
    group_id: str,
) -> PanelNotification:
    """New bet posted in one of the user's groups."""
    return PanelNotification(
        user_id=user_id,
        type=PanelNotificationType.GROUP_BET_CREATED,
        title="New Bet in Group",
        message=f'{creator_name} created "{bet_title}" in {group_name}',
        link=f"/bets/{bet_id}",
        bet_id=bet_id,
        bet_title=bet_title,
        group_id=group_id,
        group_name=group_name,
        from_user_name=creator_name,
    )


def group_invite(
    user_id: str, inviter_name: str, group_id: str, group_name: str
) -> PanelNotification:
    """Invitation to join a group."""
    return PanelNotification(
        user_id=user_id,
        type=PanelNotificationType.GROUP_INVITE,
        title="Group Invitation",
        message=f"{inviter_name} invited you to join {group_name}",
        link=f"/groups/{group_id}",
        group_id=group_id,
        group_name=group_name,
        from_user_name=inviter_name,
    )
