"""
Audit Log Repository.

Append and read access to the privileged-action ledger. There is no update
or delete path.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from repositories import db_models
from repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[db_models.AuditLog]):
    """Repository for audit log operations."""

    def __init__(self, db: Session):
        """Initialize repository."""
        super().__init__(db_models.AuditLog, db)

    def append(self, entry: db_models.AuditLog) -> db_models.AuditLog:
        """
        Append one entry and commit.

        Args:
            entry: Entry to persist

        Returns:
            Persisted entry with id and timestamp populated
        """
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def _build_query(
        self,
        actor_id: Optional[str] = None,
        action: Optional[str] = None,
        object_type: Optional[str] = None,
        object_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ):
        """Build filtered query for audit logs."""
        query = self.db.query(self.model)

        if actor_id:
            query = query.filter(self.model.actor_id == actor_id)
        if action:
            query = query.filter(self.model.action == action)
        if object_type:
            query = query.filter(self.model.object_type == object_type)
        if object_id:
            query = query.filter(self.model.object_id == object_id)
        if start_date:
            query = query.filter(self.model.created_at >= start_date)
        if end_date:
            query = query.filter(self.model.created_at <= end_date)

        return query

    def get_logs(
        self,
        actor_id: Optional[str] = None,
        action: Optional[str] = None,
        object_type: Optional[str] = None,
        object_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[db_models.AuditLog], int]:
        """
        Get audit logs with filters, newest first.

        Args:
            actor_id: Filter by acting user
            action: Filter by action name
            object_type: Filter by object type
            object_id: Filter by object ID
            start_date: Filter by start date
            end_date: Filter by end date
            limit: Maximum records to return
            offset: Number of records to skip

        Returns:
            Tuple of (matching entries, total count)
        """
        query = self._build_query(
            actor_id=actor_id,
            action=action,
            object_type=object_type,
            object_id=object_id,
            start_date=start_date,
            end_date=end_date,
        )
        total = query.count()
        entries = (
            query.order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return entries, total
