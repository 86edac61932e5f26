"""
Repository for sanction records (append-only).
"""

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Sanction


class SanctionRepository(BaseRepository[Sanction]):
    """Repository for sanction data access."""

    def __init__(self, db: Session):
        super().__init__(Sanction, db)

    def get_user_sanctions(
        self,
        user_id: str,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Sanction]:
        """
        Get sanctions issued against a user, newest first.

        Args:
            user_id: ID of the user
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            List of sanctions
        """
        return (
            self.db.query(Sanction)
            .filter(Sanction.user_id == user_id)
            .order_by(Sanction.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_for_user(self, user_id: str) -> int:
        """Count sanctions issued against a user."""
        return self.db.query(Sanction).filter(Sanction.user_id == user_id).count()
