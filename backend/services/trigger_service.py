"""
Event triggers: turn a newly created document into push notifications.

Each trigger kind loads its document, resolves recipients, fans out
delivery and runs any follow-up write. Nothing on this path raises into the
caller; a missing document is a no-op.
"""

from loguru import logger
from sqlalchemy.orm import Session

from models.results import FanOutResult, SideEffectFailure
from models.schemas import (
    ChatMessageCreated,
    CommentLikeCreated,
    FollowCreated,
    NotificationCreated,
    TriggerEvent,
)
from repositories.social_repository import (
    ChatMessageRepository,
    CommentLikeRepository,
    FollowRepository,
    MentionNotificationRepository,
)
from services.notification_service import NotificationService
from services.push_gateway import PushGateway
from services.recipient_service import NotificationPlan, RecipientService


class TriggerService:
    """Dispatch created-document events to the notification pipeline."""

    @staticmethod
    async def _deliver(
        db: Session, gateway: PushGateway, plan: NotificationPlan
    ) -> FanOutResult:
        if plan.is_empty:
            return FanOutResult()
        return await NotificationService.fan_out(
            db, gateway, plan.recipients, plan.title, plan.body, plan.data
        )

    @staticmethod
    async def on_chat_message_created(
        db: Session, gateway: PushGateway, message_id: str
    ) -> FanOutResult:
        message = ChatMessageRepository(db).get_by_id(message_id)
        if message is None:
            logger.debug(f"Chat message {message_id} not found, nothing to notify")
            return FanOutResult()
        plan = RecipientService.for_chat_message(db, message)
        return await TriggerService._deliver(db, gateway, plan)

    @staticmethod
    async def on_comment_like_created(
        db: Session, gateway: PushGateway, like_id: str
    ) -> FanOutResult:
        like = CommentLikeRepository(db).get_by_id(like_id)
        if like is None:
            logger.debug(f"Comment like {like_id} not found, nothing to notify")
            return FanOutResult()
        plan = RecipientService.for_comment_like(db, like)
        return await TriggerService._deliver(db, gateway, plan)

    @staticmethod
    async def on_follow_created(
        db: Session, gateway: PushGateway, follow_id: str
    ) -> FanOutResult:
        follow = FollowRepository(db).get_by_id(follow_id)
        if follow is None:
            logger.debug(f"Follow {follow_id} not found, nothing to notify")
            return FanOutResult()
        plan = RecipientService.for_follow(follow)
        return await TriggerService._deliver(db, gateway, plan)

    @staticmethod
    async def on_notification_created(
        db: Session, gateway: PushGateway, notification_id: str
    ) -> FanOutResult:
        """
        Deliver a mention and flag its record as sent.

        The sent flag is a follow-up write; if it fails the delivery still
        counts and the failure is reported in the result.
        """
        notification_repo = MentionNotificationRepository(db)
        notification = notification_repo.get_by_id(notification_id)
        if notification is None:
            logger.debug(f"Notification {notification_id} not found, nothing to notify")
            return FanOutResult()

        plan = RecipientService.for_mention(notification)
        if plan.is_empty:
            return FanOutResult()

        result = await TriggerService._deliver(db, gateway, plan)
        try:
            notification_repo.mark_sent(notification_id)
        except Exception as e:
            db.rollback()
            logger.warning(f"Failed to mark notification {notification_id} sent: {e}")
            result.event_failures.append(
                SideEffectFailure(operation="mark_sent", target=notification_id, error=str(e))
            )
        return result

    @staticmethod
    async def handle(db: Session, gateway: PushGateway, event: TriggerEvent) -> FanOutResult:
        """
        Route an event to its handler.

        Args:
            db: Database session
            gateway: Push backend
            event: Typed trigger event

        Returns:
            FanOutResult summarizing delivery
        """
        if isinstance(event, ChatMessageCreated):
            result = await TriggerService.on_chat_message_created(db, gateway, event.document_id)
        elif isinstance(event, CommentLikeCreated):
            result = await TriggerService.on_comment_like_created(db, gateway, event.document_id)
        elif isinstance(event, FollowCreated):
            result = await TriggerService.on_follow_created(db, gateway, event.document_id)
        elif isinstance(event, NotificationCreated):
            result = await TriggerService.on_notification_created(db, gateway, event.document_id)
        else:  # pragma: no cover - the union is closed
            raise TypeError(f"Unsupported trigger event: {event!r}")

        logger.info(
            f"Trigger {event.kind} {event.document_id}: "
            f"{len(result.recipients)} recipient(s), "
            f"{len(result.side_effect_failures)} warning(s)"
        )
        return result
