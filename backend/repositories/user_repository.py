"""
Repository for user records: device tokens, moderation state and roles.
"""

from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import User


class UserRepository(BaseRepository[User]):
    """Repository for user data access."""

    def __init__(self, db: Session):
        super().__init__(User, db)

    def remove_tokens(self, user: User, tokens: Iterable[str]) -> int:
        """
        Array-remove the given tokens from the user's token set.

        Also clears the legacy single-token field when it holds one of them.
        Removing an absent token is a no-op. Does not commit.

        Args:
            user: User whose tokens change
            tokens: Tokens to remove

        Returns:
            Number of stored token entries removed
        """
        doomed = set(tokens)
        current = list(user.fcm_tokens or [])
        kept = [t for t in current if t not in doomed]
        removed = len(current) - len(kept)

        if removed:
            # Assign a new list so the JSON column is flagged dirty
            user.fcm_tokens = kept
        if user.fcm_token and user.fcm_token in doomed:
            user.fcm_token = None
            removed += 1

        return removed

    def get_missing_last_seen(self, limit: int) -> list[User]:
        """
        Get a page of users without a ``last_seen`` value.

        Args:
            limit: Page size

        Returns:
            Users still missing the field
        """
        return (
            self.db.query(User)
            .filter(User.last_seen.is_(None))
            .order_by(User.id)
            .limit(limit)
            .all()
        )

    def set_last_seen(self, users: list[User], when: datetime) -> None:
        """Fill ``last_seen`` on a page of users. Does not commit."""
        for user in users:
            user.last_seen = when
