"""
Recipient resolution for social events.

Maps a newly created document (chat message, comment like, follow, mention
record) to the users who should hear about it and to the notification they
receive. The acting user is never a recipient. A dangling reference
(deleted chat, missing comment owner) resolves to nobody.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy.orm import Session

from models.notification_types import NotificationType
from repositories.db_models import ChatMessage, CommentLike, Follow, MentionNotification
from repositories.social_repository import ChatRepository, CommentRepository

DEFAULT_SENDER_NAME = "Someone"
DEFAULT_FORUM_NAME = "a forum"
MENTION_TYPE = "mention"


@dataclass
class NotificationPlan:
    """Who to notify about an event, and with what."""

    notification_type: NotificationType
    recipients: list[str] = field(default_factory=list)
    title: str = ""
    body: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.recipients


def describe_message_body(text: Optional[str], image_url: Optional[str]) -> str:
    """Body for a chat message: its text, else a hint about the attachment."""
    if text:
        return text
    if image_url:
        if "giphy" in image_url or ".gif" in image_url:
            return "Sent a GIF 🎬"
        return "Sent an image 📷"
    return NotificationType.DIRECT_MESSAGE.default_body


class RecipientService:
    """Resolve event recipients and notification content."""

    @staticmethod
    def for_chat_message(db: Session, message: ChatMessage) -> NotificationPlan:
        """
        Everyone in the chat except the sender.

        Args:
            db: Database session
            message: The new chat message

        Returns:
            NotificationPlan, empty when the chat no longer exists
        """
        notification_type = NotificationType.DIRECT_MESSAGE
        chat = ChatRepository(db).get_by_id(message.chat_id)
        if chat is None:
            return NotificationPlan(notification_type)

        sender_name = chat.last_message_sender_name or DEFAULT_SENDER_NAME
        recipients: list[str] = []
        for participant in chat.participants or []:
            if participant and participant != message.sender_id and participant not in recipients:
                recipients.append(participant)

        return NotificationPlan(
            notification_type,
            recipients=recipients,
            title=notification_type.format_title(sender_name=sender_name),
            body=describe_message_body(message.text, message.image_url),
            data={
                "type": notification_type.data_type,
                "chatId": message.chat_id,
                "senderId": message.sender_id,
                "senderName": sender_name,
            },
        )

    @staticmethod
    def for_comment_like(db: Session, like: CommentLike) -> NotificationPlan:
        """The comment's author, unless they liked their own comment."""
        notification_type = NotificationType.COMMENT_LIKE
        comment = CommentRepository(db).get_by_id(like.comment_id)
        if comment is None or not comment.user_id or comment.user_id == like.user_id:
            return NotificationPlan(notification_type)

        return NotificationPlan(
            notification_type,
            recipients=[comment.user_id],
            title=notification_type.format_title(),
            body=notification_type.default_body,
            data={
                "type": notification_type.data_type,
                "commentId": comment.id,
                # Lets the client open the item the comment belongs to
                "itemId": comment.title_id or "",
            },
        )

    @staticmethod
    def for_follow(follow: Follow) -> NotificationPlan:
        """The followed user, unless following themselves."""
        notification_type = NotificationType.FOLLOW
        target = follow.following_id
        if not target or target == follow.follower_id:
            return NotificationPlan(notification_type)

        return NotificationPlan(
            notification_type,
            recipients=[target],
            title=notification_type.format_title(),
            body=notification_type.default_body,
            data={"type": notification_type.data_type, "followerId": follow.follower_id},
        )

    @staticmethod
    def for_mention(notification: MentionNotification) -> NotificationPlan:
        """The tagged user of a mention record; nobody for self-mentions."""
        notification_type = NotificationType.MENTION
        if notification.type != MENTION_TYPE:
            return NotificationPlan(notification_type)

        recipient = notification.recipient_uid
        if not recipient or recipient == notification.sender_uid:
            return NotificationPlan(notification_type)

        sender_name = notification.sender_name or DEFAULT_SENDER_NAME
        forum_name = notification.forum_name or DEFAULT_FORUM_NAME
        return NotificationPlan(
            notification_type,
            recipients=[recipient],
            title=notification_type.format_title(
                sender_name=sender_name, forum_name=forum_name
            ),
            body=notification.message or notification_type.default_body,
            data={
                "type": notification_type.data_type,
                "forumId": notification.forum_id,
                "senderUid": notification.sender_uid,
                "senderName": sender_name,
                "forumName": forum_name,
            },
        )
