"""Unit tests for init_db functionality."""

from unittest.mock import patch

from init_db import init_db, seed_admin
from repositories.db_models import User, UserRole


class TestSeedAdmin:
    """Tests for seed_admin function."""

    def test_creates_missing_admin(self, db_session):
        user = seed_admin(db_session, "root", email="root@example.com", name="Root")

        assert user.role == UserRole.ADMIN
        assert user.email == "root@example.com"
        assert user.custom_claims["admin"] is True

    def test_promotes_existing_user(self, db_session, make_user):
        make_user("u1", fcm_tokens=["t1"], custom_claims={"banned": False})

        seed_admin(db_session, "u1")

        user = db_session.get(User, "u1")
        assert user.role == UserRole.ADMIN
        assert user.fcm_tokens == ["t1"]
        assert user.custom_claims["banned"] is False

    def test_is_idempotent(self, db_session):
        seed_admin(db_session, "root")
        seed_admin(db_session, "root")

        assert db_session.query(User).count() == 1


class TestInitDb:
    def test_skips_seed_without_admin_uid(self, monkeypatch):
        monkeypatch.delenv("ADMIN_UID", raising=False)

        with patch("init_db.create_tables") as mock_create, patch(
            "init_db.SessionLocal"
        ) as mock_session_local:
            init_db()

        mock_create.assert_called_once()
        mock_session_local.assert_not_called()

    def test_seeds_admin_from_env(self, monkeypatch):
        monkeypatch.setenv("ADMIN_UID", "root")
        monkeypatch.setenv("ADMIN_EMAIL", "root@example.com")

        with patch("init_db.create_tables"), patch(
            "init_db.SessionLocal"
        ) as mock_session_local, patch("init_db.seed_admin") as mock_seed:
            init_db()

        session = mock_session_local.return_value
        mock_seed.assert_called_once_with(
            session, "root", email="root@example.com", name=None
        )
        session.close.assert_called_once()
