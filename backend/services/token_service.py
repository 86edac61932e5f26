"""
Device token lookup and invalidation for push delivery.
"""

from loguru import logger
from sqlalchemy.orm import Session

from repositories.user_repository import UserRepository


class TokenService:
    """Reads and prunes the device tokens stored on user records."""

    @staticmethod
    def resolve_tokens(db: Session, user_id: str) -> list[str]:
        """
        Get every distinct device token registered for a user.

        Merges the legacy single-token field with the multi-device set,
        dropping empty entries and duplicates. First-seen order is kept.

        Args:
            db: Database session
            user_id: ID of the user

        Returns:
            Token list, empty when the user is unknown or has no devices
        """
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            return []

        candidates = [user.fcm_token, *(user.fcm_tokens or [])]
        tokens: list[str] = []
        for token in candidates:
            if not token:
                continue
            token = str(token)
            if token not in tokens:
                tokens.append(token)
        return tokens

    @staticmethod
    def invalidate(db: Session, user_id: str, tokens: list[str]) -> int:
        """
        Remove dead tokens from one user's record in a single write.

        Idempotent: tokens already gone are ignored, and an unknown user
        is a no-op.

        Args:
            db: Database session
            user_id: Owner of the tokens
            tokens: Tokens to remove

        Returns:
            Number of stored entries removed
        """
        if not tokens:
            return 0

        user_repo = UserRepository(db)
        user = user_repo.get_by_id(user_id)
        if user is None:
            return 0

        removed = user_repo.remove_tokens(user, tokens)
        if removed:
            user_repo.commit()
            logger.info(f"Removed {removed} invalid token(s) for user {user_id}")
        return removed
