"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

Each table corresponds to one collection of the application's document
store. Identifiers are opaque string document ids; multi-valued fields
(token sets, participant lists, moderator sets, structured metadata) are
JSON columns that repositories rewrite as whole values.
"""

import enum
import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from helpers.time_utils import utc_now
from repositories.database import Base


def _new_id() -> str:
    """Generate a document id."""
    return uuid.uuid4().hex


class UserRole(str, enum.Enum):
    """Authority levels, lowest first."""

    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _ROLE_RANKS[self]


_ROLE_RANKS = {UserRole.USER: 0, UserRole.MODERATOR: 1, UserRole.ADMIN: 2}


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    MUTED = "muted"
    BANNED = "banned"
    SHADOW_BANNED = "shadowBanned"


class SanctionType(str, enum.Enum):
    MUTE = "mute"
    BAN = "ban"
    SHADOW_BAN = "shadowBan"


class RoomVisibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class MemberRole(str, enum.Enum):
    MEMBER = "member"
    MODERATOR = "moderator"


class RoomMessageStatus(str, enum.Enum):
    VISIBLE = "visible"
    DELETED = "deleted"


class ReportStatus(str, enum.Enum):
    OPEN = "open"
    IN_REVIEW = "inReview"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class AnnouncementScope(str, enum.Enum):
    GLOBAL = "global"
    ROOM = "room"


class AnnouncementStatus(str, enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(128), primary_key=True, default=_new_id)
    display_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True, index=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole), default=UserRole.USER, nullable=False
    )

    # Device tokens: legacy single field plus the multi-device set
    fcm_token: Mapped[Optional[str]] = mapped_column(String(4096), nullable=True)
    fcm_tokens: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Moderation state
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus), default=UserStatus.ACTIVE, nullable=False
    )
    shadow_banned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    muted_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    banned_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    sanction_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_sanction_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Authorization claims mirrored onto newly issued credentials
    custom_claims: Mapped[dict[str, Any]] = mapped_column(
        JSON, default=dict, nullable=False
    )

    last_seen: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )


class Sanction(Base):
    """Immutable record of a punitive action. Append-only."""

    __tablename__ = "sanctions"
    __table_args__ = (Index("ix_sanctions_user_created", "user_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("users.id"), nullable=False
    )
    type: Mapped[SanctionType] = mapped_column(Enum(SanctionType), nullable=False)
    reason: Mapped[str] = mapped_column(Text, default="", nullable=False)
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, default=dict, nullable=False
    )
    actor_id: Mapped[str] = mapped_column(String(128), nullable=False)
    actor_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Chat(Base):
    __tablename__ = "chats"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    participants: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    last_message_sender_name: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True
    )


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    chat_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    sender_id: Mapped[str] = mapped_column(String(128), nullable=False)
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    user_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    title_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class CommentLike(Base):
    __tablename__ = "comment_likes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    comment_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)


class Follow(Base):
    __tablename__ = "follows"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    follower_id: Mapped[str] = mapped_column(String(128), nullable=False)
    following_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)


class MentionNotification(Base):
    """Client-written notification record; the backend only marks it sent."""

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    recipient_uid: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    sender_uid: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    sender_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    forum_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    forum_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    visibility: Mapped[RoomVisibility] = mapped_column(
        Enum(RoomVisibility), default=RoomVisibility.PUBLIC, nullable=False
    )
    passcode_hash: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    moderator_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    created_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class RoomMember(Base):
    __tablename__ = "room_members"
    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_room_member_room_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[MemberRole] = mapped_column(
        Enum(MemberRole), default=MemberRole.MEMBER, nullable=False
    )
    muted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    muted_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )


class RoomMessage(Base):
    __tablename__ = "room_messages"
    __table_args__ = (Index("ix_room_messages_room_created", "room_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    room_id: Mapped[str] = mapped_column(String(64), nullable=False)
    sender_id: Mapped[str] = mapped_column(String(128), nullable=False)
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[RoomMessageStatus] = mapped_column(
        Enum(RoomMessageStatus), default=RoomMessageStatus.VISIBLE, nullable=False
    )
    deleted_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    reporter_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    target_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    target_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus), default=ReportStatus.OPEN, nullable=False
    )
    assigned_to: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolution_actions: Mapped[list[str]] = mapped_column(
        JSON, default=list, nullable=False
    )
    resolved_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Announcement(Base):
    __tablename__ = "announcements"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    body: Mapped[str] = mapped_column(Text, default="", nullable=False)
    scope: Mapped[AnnouncementScope] = mapped_column(
        Enum(AnnouncementScope), default=AnnouncementScope.GLOBAL, nullable=False
    )
    room_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[AnnouncementStatus] = mapped_column(
        Enum(AnnouncementStatus), default=AnnouncementStatus.DRAFT, nullable=False
    )
    publish_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    published_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class AuditLog(Base):
    """Append-only ledger of privileged actions."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_actor_created", "actor_id", "created_at"),
        Index("ix_audit_logs_object", "object_type", "object_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    actor_id: Mapped[str] = mapped_column(String(128), nullable=False)
    actor_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    object_type: Mapped[str] = mapped_column(String(32), nullable=False)
    object_id: Mapped[str] = mapped_column(String(128), nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False, index=True
    )
