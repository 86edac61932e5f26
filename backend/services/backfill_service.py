"""
One-off data maintenance: fill ``last_seen`` for users that never had it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from helpers.time_utils import utc_now
from repositories.user_repository import UserRepository


@dataclass(frozen=True)
class BackfillResult:
    updated: int
    timestamp: datetime

    @property
    def message(self) -> str:
        return f"Updated {self.updated} users with lastSeen field"


class BackfillService:
    """Idempotent backfills over the user collection."""

    @staticmethod
    def backfill_last_seen(
        db: Session, batch_size: int, now: Optional[datetime] = None
    ) -> BackfillResult:
        """
        Set ``last_seen`` to ``now`` on every user missing it.

        Users that already have a value are never touched, so running this
        again is a no-op. Works in committed pages of ``batch_size``.

        Args:
            db: Database session
            batch_size: Users updated per commit
            now: Timestamp to write (defaults to the current time)

        Returns:
            BackfillResult with the number of users updated
        """
        now = now or utc_now()
        user_repo = UserRepository(db)
        updated = 0

        while True:
            page = user_repo.get_missing_last_seen(batch_size)
            if not page:
                break
            user_repo.set_last_seen(page, now)
            user_repo.commit()
            updated += len(page)
            logger.debug(f"Backfilled lastSeen for {len(page)} users")

        logger.info(f"lastSeen backfill complete: {updated} users updated")
        return BackfillResult(updated=updated, timestamp=now)
