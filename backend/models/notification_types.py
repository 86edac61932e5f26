"""Notification type definitions for user push notifications."""

from enum import Enum
from typing import NamedTuple


class NotificationConfig(NamedTuple):
    """Configuration for a notification type."""

    data_type: str  # value of the "type" key in the data payload
    title: str  # may reference payload fields via str.format
    body: str  # fallback body when the event carries none


class NotificationType(Enum):
    """
    Push notification types with their data tag, title template and default body.

    The data tag lets the client route a tapped notification to the right
    screen; titles are filled from the event when sent.
    """

    DIRECT_MESSAGE = NotificationConfig("dm", "New message from {sender_name}", "New message")
    COMMENT_LIKE = NotificationConfig("like", "Someone liked your comment", "Tap to view")
    FOLLOW = NotificationConfig("follow", "New follower", "You have a new follower")
    MENTION = NotificationConfig("mention", "{sender_name} mentioned you in {forum_name}", "")

    @property
    def data_type(self) -> str:
        """Get the data payload tag for this notification type."""
        return self.value.data_type

    @property
    def default_body(self) -> str:
        """Get the fallback body for this notification type."""
        return self.value.body

    def format_title(self, **fields: str) -> str:
        """Render the title template with event fields."""
        return self.value.title.format(**fields)
