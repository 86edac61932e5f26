"""
Repository pattern implementation for data access layer.
"""

from .audit_log_repository import AuditLogRepository
from .base import BaseRepository
from .report_repository import AnnouncementRepository, ReportRepository
from .room_repository import RoomMemberRepository, RoomMessageRepository, RoomRepository
from .sanction_repository import SanctionRepository
from .social_repository import (
    ChatMessageRepository,
    ChatRepository,
    CommentLikeRepository,
    CommentRepository,
    FollowRepository,
    MentionNotificationRepository,
)
from .user_repository import UserRepository

__all__ = [
    "AnnouncementRepository",
    "AuditLogRepository",
    "BaseRepository",
    "ChatMessageRepository",
    "ChatRepository",
    "CommentLikeRepository",
    "CommentRepository",
    "FollowRepository",
    "MentionNotificationRepository",
    "ReportRepository",
    "RoomMemberRepository",
    "RoomMessageRepository",
    "RoomRepository",
    "SanctionRepository",
    "UserRepository",
]
