"""
Tests for audit logging of privileged actions.
"""

from unittest.mock import patch

from models.schemas import Caller, MuteUserCommand
from repositories.db_models import AuditLog, UserStatus
from services.audit_service import AuditAction, AuditService
from services.sanction_service import SanctionService


class TestRecord:
    """Tests for AuditService.record"""

    def test_appends_entry(self, db_session) -> None:
        actor = Caller(uid="admin1", name="Admin")

        failure = AuditService.record(
            db_session, actor, AuditAction.DELETE_ROOM, "room", "r1", {"messagesDeleted": 3}
        )

        entry = db_session.query(AuditLog).one()
        assert failure is None
        assert entry.actor_id == "admin1"
        assert entry.actor_name == "Admin"
        assert entry.details == {"messagesDeleted": 3}
        assert entry.created_at is not None

    def test_actor_name_falls_back_to_email(self, db_session) -> None:
        AuditService.record(
            db_session, Caller(uid="a", email="a@example.com"), "mute_user", "user", "u"
        )

        assert db_session.query(AuditLog).one().actor_name == "a@example.com"

    def test_failure_is_returned_not_raised(self, db_session) -> None:
        with patch(
            "services.audit_service.AuditLogRepository.append",
            side_effect=RuntimeError("disk full"),
        ):
            failure = AuditService.record(
                db_session, Caller(uid="a"), "ban_user", "user", "u1"
            )

        assert failure is not None
        assert failure.operation == "audit"
        assert failure.target == "user/u1"
        assert "disk full" in failure.error


class TestAuditFailureKeepsAction:
    """The primary write survives a failed audit append."""

    def test_mute_persists_with_warning(
        self, db_session, settings, moderator_caller, make_user
    ) -> None:
        target = make_user("target")

        with patch(
            "services.audit_service.AuditLogRepository.append",
            side_effect=RuntimeError("disk full"),
        ):
            result = SanctionService.mute_user(
                db_session, moderator_caller, MuteUserCommand(user_id="target"), settings
            )

        db_session.refresh(target)
        response = result.to_response()
        assert response["success"] is True
        assert len(response["warnings"]) == 1
        assert response["warnings"][0].startswith("audit failed for user/target")
        assert target.status == UserStatus.MUTED
        assert db_session.query(AuditLog).count() == 0


class TestGetLogs:
    """Tests for AuditService.get_logs"""

    def test_filters_and_total(self, db_session) -> None:
        for i, action in enumerate(["mute_user", "ban_user", "mute_user"]):
            AuditService.record(db_session, Caller(uid=f"a{i}"), action, "user", f"u{i}")

        entries, total = AuditService.get_logs(db_session, action="mute_user")

        assert total == 2
        assert {e.object_id for e in entries} == {"u0", "u2"}

    def test_newest_first_with_paging(self, db_session) -> None:
        for i in range(3):
            AuditService.record(db_session, Caller(uid="a"), "kick_room_member", "room", f"r{i}")

        entries, total = AuditService.get_logs(db_session, limit=2)

        assert total == 3
        assert [e.object_id for e in entries] == ["r2", "r1"]
