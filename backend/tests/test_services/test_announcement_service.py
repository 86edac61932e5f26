"""
Unit tests for AnnouncementService.
"""

import pytest
from pydantic import ValidationError

from models.exceptions import (
    AnnouncementNotFoundException,
    InsufficientPermissionsException,
    RoomNotFoundException,
)
from models.schemas import DeleteAnnouncementCommand, SaveAnnouncementCommand
from repositories.db_models import (
    Announcement,
    AnnouncementScope,
    AnnouncementStatus,
    AuditLog,
)
from services.announcement_service import AnnouncementService


class TestSaveAnnouncement:
    """Tests for AnnouncementService.save_announcement"""

    def test_create_global_draft(self, db_session, settings, admin_caller) -> None:
        result = AnnouncementService.save_announcement(
            db_session,
            admin_caller,
            SaveAnnouncementCommand(title="Maintenance", body="Tonight"),
            settings,
        )

        announcement = db_session.get(Announcement, result.data["announcementId"])
        assert result.data["created"] is True
        assert announcement.scope == AnnouncementScope.GLOBAL
        assert announcement.status == AnnouncementStatus.DRAFT
        assert announcement.published_at is None
        assert announcement.created_by == admin_caller.uid

    def test_publish_stamps_once(self, db_session, settings, admin_caller) -> None:
        created = AnnouncementService.save_announcement(
            db_session,
            admin_caller,
            SaveAnnouncementCommand(title="News", status=AnnouncementStatus.PUBLISHED),
            settings,
        )
        announcement_id = created.data["announcementId"]
        first = db_session.get(Announcement, announcement_id).published_at

        AnnouncementService.save_announcement(
            db_session,
            admin_caller,
            SaveAnnouncementCommand(
                announcement_id=announcement_id,
                title="News (edited)",
                status=AnnouncementStatus.PUBLISHED,
            ),
            settings,
        )

        announcement = db_session.get(Announcement, announcement_id)
        assert first is not None
        assert announcement.published_at == first
        assert announcement.title == "News (edited)"

    def test_room_scope_needs_existing_room(self, db_session, settings, admin_caller) -> None:
        with pytest.raises(RoomNotFoundException):
            AnnouncementService.save_announcement(
                db_session,
                admin_caller,
                SaveAnnouncementCommand(
                    title="Hi", scope=AnnouncementScope.ROOM, room_id="nope"
                ),
                settings,
            )
        assert db_session.query(Announcement).count() == 0

    def test_room_scope(self, db_session, settings, admin_caller, test_room) -> None:
        result = AnnouncementService.save_announcement(
            db_session,
            admin_caller,
            SaveAnnouncementCommand(title="Hi", scope="room", room_id="room1"),
            settings,
        )

        announcement = db_session.get(Announcement, result.data["announcementId"])
        assert announcement.room_id == "room1"

    def test_room_scope_without_room_is_invalid(self) -> None:
        with pytest.raises(ValidationError):
            SaveAnnouncementCommand(title="Hi", scope=AnnouncementScope.ROOM)

    def test_requires_admin(self, db_session, settings, moderator_caller) -> None:
        with pytest.raises(InsufficientPermissionsException):
            AnnouncementService.save_announcement(
                db_session, moderator_caller, SaveAnnouncementCommand(title="Hi"), settings
            )


class TestDeleteAnnouncement:
    """Tests for AnnouncementService.delete_announcement"""

    def test_delete(self, db_session, settings, admin_caller) -> None:
        created = AnnouncementService.save_announcement(
            db_session, admin_caller, SaveAnnouncementCommand(title="Bye"), settings
        )
        announcement_id = created.data["announcementId"]

        AnnouncementService.delete_announcement(
            db_session,
            admin_caller,
            DeleteAnnouncementCommand(announcement_id=announcement_id),
            settings,
        )

        assert db_session.get(Announcement, announcement_id) is None
        actions = [log.action for log in db_session.query(AuditLog).all()]
        assert sorted(actions) == ["delete_announcement", "save_announcement"]

    def test_unknown_announcement(self, db_session, settings, admin_caller) -> None:
        with pytest.raises(AnnouncementNotFoundException):
            AnnouncementService.delete_announcement(
                db_session,
                admin_caller,
                DeleteAnnouncementCommand(announcement_id="nope"),
                settings,
            )
