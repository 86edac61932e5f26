"""
Service for user-level moderation: roles, mutes, bans and shadow bans.

Every action checks the caller's authority before touching the store,
commits its primary change, then appends one audit entry. The audit write
is best-effort and reported in the ActionResult.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from helpers.durations import minutes_or_default
from helpers.time_utils import format_iso8601, minutes_from_now, utc_now
from models.config import Settings
from models.results import ActionResult
from models.schemas import (
    BanUserCommand,
    Caller,
    MuteUserCommand,
    SetUserRoleCommand,
    ShadowBanUserCommand,
    UnbanUserCommand,
    UnmuteUserCommand,
)
from repositories.db_models import Sanction, SanctionType, User, UserRole, UserStatus
from repositories.sanction_repository import SanctionRepository
from repositories.user_repository import UserRepository
from services.audit_service import AuditAction, AuditService
from services.authority_service import AuthorityService

BANNED_CLAIM = "banned"


class SanctionService:
    """Service for user sanction operations."""

    @staticmethod
    def _finish(
        db: Session,
        caller: Caller,
        action: str,
        user: User,
        details: dict[str, Any],
        data: dict[str, Any],
    ) -> ActionResult:
        """Commit the user change, audit it and build the result."""
        UserRepository(db).commit()
        result = ActionResult(action=action, data={"userId": user.id, **data})
        failure = AuditService.record(db, caller, action, "user", user.id, details)
        if failure:
            result.side_effect_failures.append(failure)
        return result

    @staticmethod
    def _append_sanction(
        db: Session,
        user: User,
        caller: Caller,
        sanction_type: SanctionType,
        reason: str,
        expires_at=None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> None:
        """Add a sanction record and bump the user's sanction counter."""
        SanctionRepository(db).add(
            Sanction(
                user_id=user.id,
                type=sanction_type,
                reason=reason or "",
                metadata_=metadata or {},
                actor_id=caller.uid,
                actor_name=caller.name or caller.email,
                expires_at=expires_at,
            )
        )
        user.sanction_count = (user.sanction_count or 0) + 1
        user.last_sanction_reason = reason or None

    @staticmethod
    def set_user_role(
        db: Session, caller: Caller, command: SetUserRoleCommand, settings: Settings
    ) -> ActionResult:
        """
        Set a user's role and mirror it into their claims.

        Requires admin.
        """
        AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)

        role = UserRole(command.role)
        user, _ = UserRepository(db).upsert(command.user_id, {"role": role})
        user.custom_claims = {
            **(user.custom_claims or {}),
            "role": role.value,
            "admin": role == UserRole.ADMIN,
            "moderator": role == UserRole.MODERATOR,
        }
        return SanctionService._finish(
            db,
            caller,
            AuditAction.SET_USER_ROLE,
            user,
            details={"role": role.value},
            data={"role": role.value},
        )

    @staticmethod
    def mute_user(
        db: Session, caller: Caller, command: MuteUserCommand, settings: Settings
    ) -> ActionResult:
        """
        Mute a user globally.

        Requires moderator. A missing, non-numeric or non-positive duration
        falls back to DEFAULT_MUTE_MINUTES and long ones are capped at
        MAX_SANCTION_MINUTES.
        """
        AuthorityService.require_role(db, caller, UserRole.MODERATOR, settings)

        minutes = minutes_or_default(
            command.duration_minutes,
            settings.DEFAULT_MUTE_MINUTES,
            settings.MAX_SANCTION_MINUTES,
        )
        muted_until = minutes_from_now(minutes)

        user, _ = UserRepository(db).upsert(
            command.user_id, {"status": UserStatus.MUTED, "muted_until": muted_until}
        )
        SanctionService._append_sanction(
            db,
            user,
            caller,
            SanctionType.MUTE,
            command.reason,
            expires_at=muted_until,
            metadata={"durationMinutes": minutes},
        )
        return SanctionService._finish(
            db,
            caller,
            AuditAction.MUTE_USER,
            user,
            details={"durationMinutes": minutes, "reason": command.reason},
            data={"mutedUntil": format_iso8601(muted_until)},
        )

    @staticmethod
    def unmute_user(
        db: Session, caller: Caller, command: UnmuteUserCommand, settings: Settings
    ) -> ActionResult:
        """Lift a global mute. Requires moderator."""
        AuthorityService.require_role(db, caller, UserRole.MODERATOR, settings)

        user, _ = UserRepository(db).upsert(
            command.user_id,
            {
                "status": UserStatus.ACTIVE,
                "muted_until": None,
                "last_sanction_reason": None,
            },
        )
        return SanctionService._finish(
            db, caller, AuditAction.UNMUTE_USER, user, details={}, data={}
        )

    @staticmethod
    def ban_user(
        db: Session, caller: Caller, command: BanUserCommand, settings: Settings
    ) -> ActionResult:
        """
        Ban a user.

        Requires admin. Without a duration the ban has no expiry, replacing any
        earlier one; a supplied but invalid duration falls back to
        DEFAULT_BAN_MINUTES. Durations are capped at MAX_SANCTION_MINUTES.
        """
        AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)

        minutes = None
        banned_until = None
        if command.duration_minutes is not None:
            minutes = minutes_or_default(
                command.duration_minutes,
                settings.DEFAULT_BAN_MINUTES,
                settings.MAX_SANCTION_MINUTES,
            )
            banned_until = minutes_from_now(minutes)

        user, _ = UserRepository(db).upsert(
            command.user_id, {"status": UserStatus.BANNED, "banned_until": banned_until}
        )
        user.custom_claims = {**(user.custom_claims or {}), BANNED_CLAIM: True}

        SanctionService._append_sanction(
            db,
            user,
            caller,
            SanctionType.BAN,
            command.reason,
            expires_at=banned_until,
            metadata={"durationMinutes": minutes} if minutes is not None else {},
        )
        return SanctionService._finish(
            db,
            caller,
            AuditAction.BAN_USER,
            user,
            details={"durationMinutes": minutes, "reason": command.reason},
            data={"bannedUntil": format_iso8601(banned_until)},
        )

    @staticmethod
    def unban_user(
        db: Session, caller: Caller, command: UnbanUserCommand, settings: Settings
    ) -> ActionResult:
        """Lift a ban and drop the banned claim. Requires admin."""
        AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)

        user, _ = UserRepository(db).upsert(
            command.user_id, {"status": UserStatus.ACTIVE, "banned_until": None}
        )
        claims = dict(user.custom_claims or {})
        claims.pop(BANNED_CLAIM, None)
        user.custom_claims = claims

        return SanctionService._finish(
            db, caller, AuditAction.UNBAN_USER, user, details={}, data={}
        )

    @staticmethod
    def shadow_ban_user(
        db: Session, caller: Caller, command: ShadowBanUserCommand, settings: Settings
    ) -> ActionResult:
        """
        Enable or disable a shadow ban. Requires admin.

        Enabling records a sanction and sets the status; disabling clears the
        flag and only resets a status that the shadow ban itself set.
        """
        AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)

        user_repo = UserRepository(db)
        user, _ = user_repo.upsert(command.user_id, {"shadow_banned": command.enabled})
        if command.enabled:
            user.status = UserStatus.SHADOW_BANNED
            SanctionService._append_sanction(
                db, user, caller, SanctionType.SHADOW_BAN, command.reason
            )
        elif user.status == UserStatus.SHADOW_BANNED:
            user.status = UserStatus.ACTIVE

        return SanctionService._finish(
            db,
            caller,
            AuditAction.SHADOW_BAN_USER,
            user,
            details={"enabled": command.enabled, "reason": command.reason},
            data={"shadowBanned": command.enabled},
        )

    @staticmethod
    def get_user_sanctions(
        db: Session,
        caller: Caller,
        user_id: str,
        settings: Settings,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[Sanction], int]:
        """List sanctions against a user, newest first. Requires moderator."""
        AuthorityService.require_role(db, caller, UserRole.MODERATOR, settings)

        sanction_repo = SanctionRepository(db)
        return (
            sanction_repo.get_user_sanctions(user_id, skip=skip, limit=limit),
            sanction_repo.count_for_user(user_id),
        )
