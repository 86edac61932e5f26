"""
Tests for caller role resolution.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from models.exceptions import AuthenticationException, InsufficientPermissionsException
from models.schemas import Caller
from repositories.db_models import Room, UserRole
from services.authority_service import AuthorityService, role_from_claims


class TestRoleFromClaims:
    """Tests for role_from_claims"""

    def test_admin_claim(self, settings) -> None:
        assert role_from_claims(Caller(uid="x", claims={"admin": True}), settings) == UserRole.ADMIN

    def test_role_claim(self, settings) -> None:
        caller = Caller(uid="x", claims={"role": "moderator"})

        assert role_from_claims(caller, settings) == UserRole.MODERATOR

    def test_email_allowlist_case_insensitive(self, settings) -> None:
        caller = Caller(uid="x", email="Boss@Example.com")

        assert role_from_claims(caller, settings) == UserRole.ADMIN

    def test_no_claims(self, settings) -> None:
        assert role_from_claims(Caller(uid="x"), settings) == UserRole.USER


class TestResolveRole:
    """Tests for AuthorityService.resolve_role"""

    def test_stored_role_wins_over_claims(self, db_session, settings, regular_user) -> None:
        """A stale admin claim does not override the stored role."""
        caller = Caller(uid=regular_user.id, claims={"admin": True})

        assert AuthorityService.resolve_role(db_session, caller, settings) == UserRole.USER

    def test_stored_role_wins_over_allowlist(self, db_session, settings, make_user) -> None:
        make_user("boss", email="boss@example.com")
        caller = Caller(uid="boss", email="boss@example.com")

        assert AuthorityService.resolve_role(db_session, caller, settings) == UserRole.USER

    def test_claims_used_without_record(self, db_session, settings) -> None:
        caller = Caller(uid="nobody", claims={"moderator": True})

        assert AuthorityService.resolve_role(db_session, caller, settings) == UserRole.MODERATOR

    def test_claims_used_when_lookup_fails(self, db_session, settings, admin_user) -> None:
        caller = Caller(uid=admin_user.id, email="boss@example.com")

        with patch(
            "services.authority_service.UserRepository.get_by_id",
            side_effect=OperationalError("SELECT", {}, Exception("locked")),
        ):
            role = AuthorityService.resolve_role(db_session, caller, settings)

        assert role == UserRole.ADMIN


class TestRequireRole:
    """Tests for AuthorityService.require_role"""

    def test_missing_caller(self, db_session, settings) -> None:
        with pytest.raises(AuthenticationException):
            AuthorityService.require_role(db_session, None, UserRole.USER, settings)

    def test_higher_role_satisfies_lower(self, db_session, settings, admin_caller) -> None:
        role = AuthorityService.require_role(
            db_session, admin_caller, UserRole.MODERATOR, settings
        )

        assert role == UserRole.ADMIN

    def test_insufficient(self, db_session, settings, moderator_caller) -> None:
        with pytest.raises(InsufficientPermissionsException):
            AuthorityService.require_role(db_session, moderator_caller, UserRole.ADMIN, settings)

    def test_room_moderator(self, db_session, settings, user_caller) -> None:
        room = Room(id="r1", name="R", moderator_ids=[user_caller.uid])

        role = AuthorityService.require_role(
            db_session, user_caller, UserRole.MODERATOR, settings, room=room
        )

        assert role == UserRole.MODERATOR

    def test_room_moderator_is_not_admin(self, db_session, settings, user_caller) -> None:
        room = Room(id="r1", name="R", moderator_ids=[user_caller.uid])

        with pytest.raises(InsufficientPermissionsException):
            AuthorityService.require_role(
                db_session, user_caller, UserRole.ADMIN, settings, room=room
            )
