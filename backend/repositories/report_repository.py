"""
Repositories for moderation reports and announcements.
"""

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import Announcement, Report


class ReportRepository(BaseRepository[Report]):
    """Repository for moderation reports."""

    def __init__(self, db: Session):
        super().__init__(Report, db)


class AnnouncementRepository(BaseRepository[Announcement]):
    """Repository for announcements."""

    def __init__(self, db: Session):
        super().__init__(Announcement, db)
