"""
Caller authority for moderation actions.

The persisted user record is the source of truth for a caller's role.
Credential claims and the admin email allowlist are only consulted when
that record cannot be read.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.config import Settings
from models.exceptions import AuthenticationException, InsufficientPermissionsException
from models.schemas import Caller
from repositories.db_models import Room, UserRole
from repositories.user_repository import UserRepository


def role_from_claims(caller: Caller, settings: Settings) -> UserRole:
    """Derive a role from credential claims and the admin allowlist."""
    claims = caller.claims or {}
    if claims.get("admin") is True or claims.get("role") == UserRole.ADMIN.value:
        return UserRole.ADMIN
    if claims.get("moderator") is True or claims.get("role") == UserRole.MODERATOR.value:
        return UserRole.MODERATOR
    if caller.email and caller.email.lower() in settings.ADMIN_EMAILS:
        return UserRole.ADMIN
    return UserRole.USER


class AuthorityService:
    """Resolve and enforce caller roles."""

    @staticmethod
    def resolve_role(db: Session, caller: Caller, settings: Settings) -> UserRole:
        """
        Get the caller's effective role.

        Args:
            db: Database session
            caller: Authenticated caller
            settings: Application settings (admin allowlist)

        Returns:
            Effective role
        """
        try:
            user = UserRepository(db).get_by_id(caller.uid)
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Role lookup failed for {caller.uid}, using claims: {e}")
            user = None

        if user is not None:
            return UserRole(user.role)
        return role_from_claims(caller, settings)

    @staticmethod
    def require_role(
        db: Session,
        caller: Optional[Caller],
        minimum: UserRole,
        settings: Settings,
        room: Optional[Room] = None,
    ) -> UserRole:
        """
        Ensure the caller holds at least ``minimum``.

        For room-scoped actions, a caller listed among the room's moderators
        is accepted regardless of global role.

        Raises:
            AuthenticationException: No caller identity
            InsufficientPermissionsException: Role too low
        """
        if caller is None or not caller.uid:
            raise AuthenticationException("Authentication required")

        role = AuthorityService.resolve_role(db, caller, settings)
        if role.rank >= minimum.rank:
            return role
        if room is not None and caller.uid in (room.moderator_ids or []):
            return UserRole.MODERATOR

        logger.warning(
            f"Permission denied: {caller.uid} ({role.value}) needs {minimum.value}"
        )
        raise InsufficientPermissionsException(
            f"{minimum.value.capitalize()} privileges required"
        )
