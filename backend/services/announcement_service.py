"""
Service for announcement management (admin only).
"""

from sqlalchemy.orm import Session

from helpers.time_utils import utc_now
from models.config import Settings
from models.exceptions import AnnouncementNotFoundException, RoomNotFoundException
from models.results import ActionResult
from models.schemas import Caller, DeleteAnnouncementCommand, SaveAnnouncementCommand
from repositories.db_models import (
    Announcement,
    AnnouncementScope,
    AnnouncementStatus,
    UserRole,
)
from repositories.report_repository import AnnouncementRepository
from repositories.room_repository import RoomRepository
from services.audit_service import AuditAction, AuditService
from services.authority_service import AuthorityService


class AnnouncementService:
    """Service for announcement operations."""

    @staticmethod
    def save_announcement(
        db: Session,
        caller: Caller,
        command: SaveAnnouncementCommand,
        settings: Settings,
    ) -> ActionResult:
        """
        Create or update an announcement.

        Room-scoped announcements must point at an existing room. Publishing
        stamps ``published_at`` the first time only.

        Raises:
            PermissionDeniedException: Caller is not an admin
            RoomNotFoundException: Target room does not exist
        """
        AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)

        room_id = None
        if command.scope == AnnouncementScope.ROOM:
            if RoomRepository(db).get_by_id(command.room_id) is None:
                raise RoomNotFoundException(command.room_id)
            room_id = command.room_id

        repo = AnnouncementRepository(db)
        fields = {
            "title": command.title,
            "body": command.body,
            "scope": command.scope,
            "room_id": room_id,
            "status": command.status,
            "publish_at": command.publish_at,
        }
        if command.announcement_id:
            announcement, created = repo.upsert(command.announcement_id, fields)
        else:
            announcement = Announcement(**fields)
            repo.add(announcement)
            created = True

        now = utc_now()
        if created:
            announcement.created_by = caller.uid
            announcement.created_at = now
        if command.status == AnnouncementStatus.PUBLISHED and announcement.published_at is None:
            announcement.published_at = now
        announcement.updated_at = now
        repo.commit()
        repo.refresh(announcement)

        result = ActionResult(
            action=AuditAction.SAVE_ANNOUNCEMENT,
            data={"announcementId": announcement.id, "created": created},
        )
        failure = AuditService.record(
            db,
            caller,
            result.action,
            "announcement",
            announcement.id,
            {
                "title": announcement.title,
                "scope": command.scope.value,
                "roomId": room_id,
                "status": command.status.value,
                "created": created,
            },
        )
        if failure:
            result.side_effect_failures.append(failure)
        return result

    @staticmethod
    def delete_announcement(
        db: Session,
        caller: Caller,
        command: DeleteAnnouncementCommand,
        settings: Settings,
    ) -> ActionResult:
        """Delete an announcement. Requires admin."""
        AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)

        repo = AnnouncementRepository(db)
        announcement = repo.get_by_id(command.announcement_id)
        if announcement is None:
            raise AnnouncementNotFoundException(command.announcement_id)

        title = announcement.title
        repo.delete(announcement)
        repo.commit()

        result = ActionResult(
            action=AuditAction.DELETE_ANNOUNCEMENT,
            data={"announcementId": command.announcement_id},
        )
        failure = AuditService.record(
            db,
            caller,
            result.action,
            "announcement",
            command.announcement_id,
            {"title": title},
        )
        if failure:
            result.side_effect_failures.append(failure)
        return result
