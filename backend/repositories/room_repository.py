"""
Repository for rooms, room memberships and room messages.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import (
    MemberRole,
    Room,
    RoomMember,
    RoomMessage,
    RoomMessageStatus,
)


class RoomRepository(BaseRepository[Room]):
    """Repository for room documents."""

    def __init__(self, db: Session):
        super().__init__(Room, db)

    @staticmethod
    def add_moderator_id(room: Room, user_id: str) -> None:
        """Array-union a user id into the room's moderator set."""
        if user_id not in (room.moderator_ids or []):
            room.moderator_ids = [*(room.moderator_ids or []), user_id]

    @staticmethod
    def remove_moderator_id(room: Room, user_id: str) -> None:
        """Array-remove a user id from the room's moderator set."""
        room.moderator_ids = [m for m in (room.moderator_ids or []) if m != user_id]


class RoomMemberRepository(BaseRepository[RoomMember]):
    """Repository for room membership records."""

    def __init__(self, db: Session):
        super().__init__(RoomMember, db)

    def get_member(self, room_id: str, user_id: str) -> Optional[RoomMember]:
        """
        Get a user's membership in a room.

        Args:
            room_id: ID of the room
            user_id: ID of the member

        Returns:
            Membership if exists, None otherwise
        """
        return (
            self.db.query(RoomMember)
            .filter(RoomMember.room_id == room_id, RoomMember.user_id == user_id)
            .first()
        )

    def get_or_create_member(self, room_id: str, user_id: str) -> RoomMember:
        """Return the membership, adding a plain member record if absent."""
        member = self.get_member(room_id, user_id)
        if member is None:
            member = RoomMember(room_id=room_id, user_id=user_id, role=MemberRole.MEMBER)
            self.db.add(member)
        return member

    def count_for_room(self, room_id: str) -> int:
        """Count memberships of a room."""
        return self.db.query(RoomMember).filter(RoomMember.room_id == room_id).count()

    def delete_page(self, room_id: str, batch_size: int) -> int:
        """
        Delete up to ``batch_size`` memberships of a room and commit.

        Returns:
            Number deleted (0 once the room has no members left)
        """
        ids = [
            row.id
            for row in self.db.query(RoomMember.id)
            .filter(RoomMember.room_id == room_id)
            .limit(batch_size)
            .all()
        ]
        if not ids:
            return 0
        deleted = (
            self.db.query(RoomMember)
            .filter(RoomMember.id.in_(ids))
            .delete(synchronize_session=False)
        )
        self.commit()
        return deleted


class RoomMessageRepository(BaseRepository[RoomMessage]):
    """Repository for room messages."""

    def __init__(self, db: Session):
        super().__init__(RoomMessage, db)

    def get_recent_visible(self, room_id: str, limit: int) -> list[RoomMessage]:
        """
        Get the most recent messages in a room that are not yet deleted.

        Args:
            room_id: ID of the room
            limit: Maximum number of messages

        Returns:
            Messages, newest first
        """
        return (
            self.db.query(RoomMessage)
            .filter(
                RoomMessage.room_id == room_id,
                RoomMessage.status != RoomMessageStatus.DELETED,
            )
            .order_by(RoomMessage.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def soft_delete(messages: list[RoomMessage], deleted_by: str, when: datetime) -> None:
        """Mark messages deleted without removing them. Does not commit."""
        for message in messages:
            message.status = RoomMessageStatus.DELETED
            message.deleted_by = deleted_by
            message.deleted_at = when

    def count_for_room(self, room_id: str) -> int:
        """Count messages (any status) in a room."""
        return self.db.query(RoomMessage).filter(RoomMessage.room_id == room_id).count()

    def delete_page(self, room_id: str, batch_size: int) -> int:
        """
        Delete up to ``batch_size`` messages of a room and commit.

        Returns:
            Number deleted (0 once the room is empty)
        """
        ids = [
            row.id
            for row in self.db.query(RoomMessage.id)
            .filter(RoomMessage.room_id == room_id)
            .limit(batch_size)
            .all()
        ]
        if not ids:
            return 0
        deleted = (
            self.db.query(RoomMessage)
            .filter(RoomMessage.id.in_(ids))
            .delete(synchronize_session=False)
        )
        self.commit()
        return deleted
