"""Service for audit logging of privileged moderation actions."""

from typing import Any, Optional

from loguru import logger
from sqlalchemy.orm import Session

from models.results import SideEffectFailure
from models.schemas import Caller
from repositories.audit_log_repository import AuditLogRepository
from repositories.db_models import AuditLog


class AuditAction:
    """Audit action names, one per state-changing admin action."""

    SET_USER_ROLE = "set_user_role"
    MUTE_USER = "mute_user"
    UNMUTE_USER = "unmute_user"
    BAN_USER = "ban_user"
    UNBAN_USER = "unban_user"
    SHADOW_BAN_USER = "shadow_ban_user"
    ASSIGN_ROOM_MODERATOR = "assign_room_moderator"
    MUTE_ROOM_MEMBER = "mute_room_member"
    KICK_ROOM_MEMBER = "kick_room_member"
    CLEAR_ROOM_MESSAGES = "clear_room_messages"
    ASSIGN_REPORT = "assign_report"
    RESOLVE_REPORT = "resolve_report"
    SAVE_ROOM = "save_room"
    DELETE_ROOM = "delete_room"
    SAVE_ANNOUNCEMENT = "save_announcement"
    DELETE_ANNOUNCEMENT = "delete_announcement"


class AuditService:
    """Service for audit logging."""

    @staticmethod
    def record(
        db: Session,
        actor: Caller,
        action: str,
        object_type: str,
        object_id: str,
        details: Optional[dict[str, Any]] = None,
    ) -> Optional[SideEffectFailure]:
        """
        Append an audit entry for an action that already took effect.

        Called after the primary write commits. A failure here is rolled
        back and reported; it never undoes the action being audited.

        Args:
            db: Database session
            actor: Caller who performed the action
            action: One of the AuditAction names
            object_type: Kind of object acted upon ("user", "room", ...)
            object_id: ID of the object acted upon
            details: Action arguments worth keeping

        Returns:
            None on success, otherwise the failure to surface to the caller
        """
        entry = AuditLog(
            actor_id=actor.uid,
            actor_name=actor.name or actor.email,
            action=action,
            object_type=object_type,
            object_id=object_id,
            details=details or {},
        )
        try:
            AuditLogRepository(db).append(entry)
        except Exception as e:
            db.rollback()
            logger.error(
                f"AUDIT write failed: {action} on {object_type}/{object_id} "
                f"by {actor.uid}: {e}"
            )
            return SideEffectFailure(
                operation="audit", target=f"{object_type}/{object_id}", error=str(e)
            )

        logger.info(f"AUDIT: {actor.uid} {action} {object_type}/{object_id}")
        return None

    @staticmethod
    def get_logs(
        db: Session,
        actor_id: Optional[str] = None,
        action: Optional[str] = None,
        object_type: Optional[str] = None,
        object_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[AuditLog], int]:
        """Read audit entries, newest first, with their total count."""
        return AuditLogRepository(db).get_logs(
            actor_id=actor_id,
            action=action,
            object_type=object_type,
            object_id=object_id,
            limit=limit,
            offset=offset,
        )
