"""Notification dispatch for bet, friend request and settlement events."""

from . import panel
from .dispatcher import NotificationDispatcher
from .exceptions import (
    NotificationError,
    NotificationLookupError,
    NotificationWriteError,
)
from .models import (
    DispatchResult,
    NotificationRecord,
    NotificationType,
    PanelNotification,
    PanelNotificationType,
)

__all__ = [
    "NotificationDispatcher",
    "DispatchResult",
    "NotificationRecord",
    "NotificationType",
    "PanelNotification",
    "PanelNotificationType",
    "NotificationError",
    "NotificationLookupError",
    "NotificationWriteError",
    "panel",
]
