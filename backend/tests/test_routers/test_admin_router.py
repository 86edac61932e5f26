"""
Tests for the admin action endpoints.
"""

from datetime import timedelta

from fastapi.testclient import TestClient

from authentication.auth import create_access_token
from repositories.db_models import AuditLog, RoomMessage, Sanction, User, UserStatus


class TestAuthentication:
    """Callers without a valid credential are rejected before any write."""

    def test_missing_token(self, client: TestClient, db_session) -> None:
        response = client.post("/api/admin/actions/muteUser", json={"userId": "u1"})

        assert response.status_code == 401
        body = response.json()
        assert body["code"] == "unauthenticated"
        assert body["correlation_id"]
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert db_session.query(AuditLog).count() == 0

    def test_garbage_token(self, client: TestClient) -> None:
        response = client.post(
            "/api/admin/actions/muteUser",
            json={"userId": "u1"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    def test_expired_token(self, client: TestClient, settings, admin_user) -> None:
        token = create_access_token(
            settings, admin_user.id, expires_delta=timedelta(minutes=-1)
        )

        response = client.post(
            "/api/admin/actions/muteUser",
            json={"userId": "u1"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Token has expired"


class TestSanctionActions:
    """Tests for the user sanction endpoints"""

    def test_mute_user(
        self, client: TestClient, db_session, moderator_auth_headers, make_user
    ) -> None:
        make_user("target")

        response = client.post(
            "/api/admin/actions/muteUser",
            json={"userId": "target", "durationMinutes": 30, "reason": "spam"},
            headers=moderator_auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["userId"] == "target"
        assert body["mutedUntil"].endswith("Z")
        assert body["warnings"] == []
        assert db_session.query(Sanction).count() == 1
        assert db_session.query(AuditLog).one().action == "mute_user"

    def test_huge_duration_is_capped(
        self, client: TestClient, moderator_auth_headers, make_user
    ) -> None:
        make_user("target")

        response = client.post(
            "/api/admin/actions/muteUser",
            json={"userId": "target", "durationMinutes": 1e12},
            headers=moderator_auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["mutedUntil"].endswith("Z")

    def test_plain_user_forbidden(
        self, client: TestClient, db_session, auth_headers, make_user
    ) -> None:
        target = make_user("target")

        response = client.post(
            "/api/admin/actions/muteUser",
            json={"userId": "target"},
            headers=auth_headers,
        )

        db_session.refresh(target)
        assert response.status_code == 403
        assert response.json()["code"] == "permission-denied"
        assert target.status == UserStatus.ACTIVE
        assert db_session.query(AuditLog).count() == 0

    def test_missing_user_id(self, client: TestClient, moderator_auth_headers) -> None:
        response = client.post(
            "/api/admin/actions/muteUser", json={}, headers=moderator_auth_headers
        )

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "invalid-argument"
        assert any("userId" in error["loc"] for error in body["detail"])

    def test_ban_and_unban(
        self, client: TestClient, db_session, admin_auth_headers, make_user
    ) -> None:
        make_user("target")

        ban = client.post(
            "/api/admin/actions/banUser",
            json={"userId": "target", "reason": "abuse"},
            headers=admin_auth_headers,
        )
        unban = client.post(
            "/api/admin/actions/unbanUser",
            json={"userId": "target"},
            headers=admin_auth_headers,
        )

        assert ban.status_code == 200
        assert ban.json()["bannedUntil"] is None
        assert unban.status_code == 200
        assert db_session.get(User, "target").status == UserStatus.ACTIVE

    def test_set_role_rejects_unknown_role(
        self, client: TestClient, admin_auth_headers
    ) -> None:
        response = client.post(
            "/api/admin/actions/setUserRole",
            json={"userId": "target", "role": "overlord"},
            headers=admin_auth_headers,
        )

        assert response.status_code == 422

    def test_admin_claim_alone_is_not_enough(
        self, client: TestClient, settings, regular_user
    ) -> None:
        """The stored role outranks a forged claim."""
        token = create_access_token(settings, regular_user.id, claims={"admin": True})

        response = client.post(
            "/api/admin/actions/shadowBanUser",
            json={"userId": "someone"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 403

    def test_list_sanctions(
        self, client: TestClient, moderator_auth_headers, make_user
    ) -> None:
        make_user("target")
        client.post(
            "/api/admin/actions/muteUser",
            json={"userId": "target", "reason": "spam"},
            headers=moderator_auth_headers,
        )

        response = client.get(
            "/api/admin/users/target/sanctions", headers=moderator_auth_headers
        )

        assert response.status_code == 200
        items = response.json()
        assert len(items) == 1
        assert items[0]["type"] == "mute"
        assert items[0]["userId"] == "target"
        assert items[0]["metadata"] == {"durationMinutes": 30}


class TestRoomActions:
    """Tests for the room endpoints"""

    def test_unknown_room_is_not_found(
        self, client: TestClient, moderator_auth_headers
    ) -> None:
        response = client.post(
            "/api/admin/actions/clearRoomMessages",
            json={"roomId": "nope"},
            headers=moderator_auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["code"] == "not-found"

    def test_unknown_room_is_forbidden_for_plain_users(
        self, client: TestClient, auth_headers
    ) -> None:
        response = client.post(
            "/api/admin/actions/clearRoomMessages",
            json={"roomId": "nope"},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert response.json()["code"] == "permission-denied"

    def test_save_then_delete_room(
        self, client: TestClient, db_session, admin_auth_headers
    ) -> None:
        saved = client.post(
            "/api/admin/actions/saveRoom",
            json={"name": "Lobby", "visibility": "public"},
            headers=admin_auth_headers,
        )
        room_id = saved.json()["roomId"]
        db_session.add(RoomMessage(room_id=room_id, sender_id="u1", text="hey"))
        db_session.commit()

        deleted = client.post(
            "/api/admin/actions/deleteRoom",
            json={"roomId": room_id},
            headers=admin_auth_headers,
        )

        assert saved.status_code == 200
        assert deleted.status_code == 200
        assert deleted.json()["messagesDeleted"] == 1
        assert db_session.query(RoomMessage).count() == 0

    def test_room_moderator_can_kick(
        self, client: TestClient, db_session, auth_headers, regular_user, test_room
    ) -> None:
        test_room.moderator_ids = [regular_user.id]
        db_session.commit()

        response = client.post(
            "/api/admin/actions/kickRoomMember",
            json={"roomId": "room1", "userId": "troll"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["removed"] is False


class TestReportAndAnnouncementActions:
    def test_assign_report(
        self, client: TestClient, moderator_auth_headers, test_report
    ) -> None:
        response = client.post(
            "/api/admin/actions/assignReport",
            json={"reportId": "report1"},
            headers=moderator_auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "inReview"

    def test_room_announcement_requires_room_id(
        self, client: TestClient, admin_auth_headers
    ) -> None:
        response = client.post(
            "/api/admin/actions/saveAnnouncement",
            json={"title": "Hi", "scope": "room"},
            headers=admin_auth_headers,
        )

        assert response.status_code == 422


class TestAuditLogs:
    """Tests for GET /api/admin/audit-logs"""

    def test_admin_can_filter(
        self, client: TestClient, admin_auth_headers, make_user
    ) -> None:
        make_user("target")
        client.post(
            "/api/admin/actions/muteUser",
            json={"userId": "target"},
            headers=admin_auth_headers,
        )
        client.post(
            "/api/admin/actions/banUser",
            json={"userId": "target"},
            headers=admin_auth_headers,
        )

        response = client.get(
            "/api/admin/audit-logs",
            params={"action": "ban_user", "objectId": "target"},
            headers=admin_auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["action"] == "ban_user"
        assert body["items"][0]["actorId"] == "admin1"

    def test_moderator_forbidden(self, client: TestClient, moderator_auth_headers) -> None:
        response = client.get("/api/admin/audit-logs", headers=moderator_auth_headers)

        assert response.status_code == 403
