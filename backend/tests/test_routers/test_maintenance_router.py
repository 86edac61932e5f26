"""
Tests for the maintenance endpoints and health check.
"""

from fastapi.testclient import TestClient

from repositories.db_models import User


class TestBackfillLastSeen:
    """Tests for POST /api/maintenance/backfill-last-seen"""

    def test_backfill(self, client: TestClient, db_session, make_user) -> None:
        make_user("u1")
        make_user("u2")

        first = client.post("/api/maintenance/backfill-last-seen")
        second = client.post("/api/maintenance/backfill-last-seen")

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["updated"] == 2
        assert first.json()["message"] == "Updated 2 users with lastSeen field"
        assert second.json()["updated"] == 0
        assert db_session.get(User, "u1").last_seen is not None


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "push": False}

    def test_correlation_header_echoed(self, client: TestClient) -> None:
        response = client.get("/api/health", headers={"X-Correlation-ID": "abc123"})

        assert response.headers["X-Correlation-ID"] == "abc123"
