"""
Read access to the social collections that raise notifications:
chats and their messages, comments and likes, follows, and mention
notification records.
"""

from sqlalchemy.orm import Session

from helpers.time_utils import utc_now
from repositories.base import BaseRepository
from repositories.db_models import (
    Chat,
    ChatMessage,
    Comment,
    CommentLike,
    Follow,
    MentionNotification,
)


class ChatRepository(BaseRepository[Chat]):
    """Repository for chats."""

    def __init__(self, db: Session):
        super().__init__(Chat, db)


class ChatMessageRepository(BaseRepository[ChatMessage]):
    """Repository for chat messages."""

    def __init__(self, db: Session):
        super().__init__(ChatMessage, db)


class CommentRepository(BaseRepository[Comment]):
    """Repository for comments."""

    def __init__(self, db: Session):
        super().__init__(Comment, db)


class CommentLikeRepository(BaseRepository[CommentLike]):
    """Repository for comment likes."""

    def __init__(self, db: Session):
        super().__init__(CommentLike, db)


class FollowRepository(BaseRepository[Follow]):
    """Repository for follows."""

    def __init__(self, db: Session):
        super().__init__(Follow, db)


class MentionNotificationRepository(BaseRepository[MentionNotification]):
    """Repository for mention notification records."""

    def __init__(self, db: Session):
        super().__init__(MentionNotification, db)

    def mark_sent(self, notification_id: str) -> bool:
        """
        Flag a notification record as delivered and commit.

        Args:
            notification_id: ID of the notification record

        Returns:
            True if the record existed and was updated
        """
        notification = self.get_by_id(notification_id)
        if notification is None:
            return False
        notification.sent = True
        notification.sent_at = utc_now()
        self.commit()
        return True
