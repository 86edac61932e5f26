"""
User push notification dispatcher.

Delivers one notification to every device of a recipient and prunes tokens
the gateway reports as dead. Best-effort: token lookup, gateway and cleanup
failures are logged and reported in the result, never raised.
"""

import asyncio
from typing import Any, Mapping

from loguru import logger
from sqlalchemy.orm import Session

from models.results import DeliveryOutcome, DeliveryResult, FanOutResult, SideEffectFailure
from services.push_gateway import PushGateway, is_dead_token_error, stringify_data
from services.token_service import TokenService


class NotificationService:
    """
    Per-user push delivery with dead-token cleanup.

    All methods are best-effort: they log failures but never raise
    exceptions to the calling trigger.
    """

    @staticmethod
    async def notify_user(
        db: Session,
        gateway: PushGateway,
        user_id: str,
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> DeliveryResult:
        """
        Send a notification to all of a user's devices.

        Args:
            db: Database session
            gateway: Push backend
            user_id: Recipient
            title: Notification title
            body: Notification body
            data: Payload; values are coerced to strings

        Returns:
            DeliveryResult with per-token outcomes and removed tokens
        """
        result = DeliveryResult(user_id=user_id)

        try:
            tokens = TokenService.resolve_tokens(db, user_id)
        except Exception as e:
            db.rollback()
            logger.error(f"Token lookup failed for user {user_id}: {e}")
            result.side_effect_failures.append(
                SideEffectFailure(operation="token_lookup", target=user_id, error=str(e))
            )
            return result

        if not tokens:
            logger.debug(f"No device tokens for user {user_id}, skipping")
            return result

        payload = stringify_data(data)
        try:
            outcomes = await gateway.send_multicast(tokens, title, body, payload)
        except Exception as e:
            logger.error(f"Push send failed for user {user_id}: {e}")
            result.outcomes = [
                DeliveryOutcome(token=t, success=False, error_code="messaging/internal")
                for t in tokens
            ]
            result.side_effect_failures.append(
                SideEffectFailure(operation="delivery", target=user_id, error=str(e))
            )
            return result

        result.outcomes = list(outcomes)
        logger.info(
            f"Push to user {user_id}: {result.succeeded}/{result.attempted} delivered"
        )

        dead = [
            o.token for o in outcomes if not o.success and is_dead_token_error(o.error_code)
        ]
        if not dead:
            return result

        try:
            TokenService.invalidate(db, user_id, dead)
            result.invalidated_tokens = dead
        except Exception as e:
            db.rollback()
            logger.warning(f"Token cleanup failed for user {user_id}: {e}")
            result.side_effect_failures.append(
                SideEffectFailure(operation="token_cleanup", target=user_id, error=str(e))
            )
        return result

    @staticmethod
    async def fan_out(
        db: Session,
        gateway: PushGateway,
        user_ids: list[str],
        title: str,
        body: str,
        data: Mapping[str, Any] | None = None,
    ) -> FanOutResult:
        """
        Notify several recipients concurrently.

        Deliveries are independent: one recipient failing does not affect
        the others, and nothing is rolled back.
        """
        if not user_ids:
            return FanOutResult()

        results = await asyncio.gather(
            *(
                NotificationService.notify_user(db, gateway, uid, title, body, data)
                for uid in user_ids
            )
        )
        return FanOutResult(results=list(results))
