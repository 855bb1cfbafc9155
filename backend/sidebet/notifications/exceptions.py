"""Notification service exceptions."""


class NotificationError(Exception):
    """Base notification exception."""

    pass


class NotificationWriteError(NotificationError):
    """A notification document could not be appended."""

    def __init__(self, message: str, recipient: str):
        super().__init__(message)
        self.recipient = recipient


class NotificationLookupError(NotificationError):
    """A user document could not be read."""

    pass
