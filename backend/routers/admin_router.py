"""
Router for admin and moderator RPC actions.

One POST route per action under ``/admin/actions``. Each takes the action's
command object as its JSON body and answers ``{success, ...data, warnings}``.
Authority is enforced inside the services, so a rejected call never writes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from helpers.pagination import PaginationLimit, PaginationLimitLarge, PaginationSkip
from helpers.rate_limiter import limiter
from models.config import Settings, get_settings
from repositories.database import get_db
from repositories.db_models import UserRole
from services.announcement_service import AnnouncementService
from services.audit_service import AuditService
from services.authority_service import AuthorityService
from services.report_service import ReportService
from services.room_service import RoomService
from services.sanction_service import SanctionService

router = APIRouter(prefix="/admin", tags=["admin"])


# ============================================================================
# User Sanctions
# ============================================================================


@router.post("/actions/setUserRole")
@limiter.limit("30/minute")
def set_user_role(
    request: Request,
    command: schemas.SetUserRoleCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Set a user's role (admin)."""
    return SanctionService.set_user_role(db, caller, command, settings).to_response()


@router.post("/actions/muteUser")
@limiter.limit("60/minute")
def mute_user(
    request: Request,
    command: schemas.MuteUserCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Mute a user globally (moderator)."""
    return SanctionService.mute_user(db, caller, command, settings).to_response()


@router.post("/actions/unmuteUser")
@limiter.limit("60/minute")
def unmute_user(
    request: Request,
    command: schemas.UnmuteUserCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Lift a global mute (moderator)."""
    return SanctionService.unmute_user(db, caller, command, settings).to_response()


@router.post("/actions/banUser")
@limiter.limit("30/minute")
def ban_user(
    request: Request,
    command: schemas.BanUserCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Ban a user (admin)."""
    return SanctionService.ban_user(db, caller, command, settings).to_response()


@router.post("/actions/unbanUser")
@limiter.limit("30/minute")
def unban_user(
    request: Request,
    command: schemas.UnbanUserCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Lift a ban (admin)."""
    return SanctionService.unban_user(db, caller, command, settings).to_response()


@router.post("/actions/shadowBanUser")
@limiter.limit("30/minute")
def shadow_ban_user(
    request: Request,
    command: schemas.ShadowBanUserCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Enable or disable a shadow ban (admin)."""
    return SanctionService.shadow_ban_user(db, caller, command, settings).to_response()


# ============================================================================
# Rooms
# ============================================================================


@router.post("/actions/assignRoomModerator")
@limiter.limit("30/minute")
def assign_room_moderator(
    request: Request,
    command: schemas.AssignRoomModeratorCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Add or remove a room moderator (admin)."""
    return RoomService.assign_room_moderator(db, caller, command, settings).to_response()


@router.post("/actions/muteRoomMember")
@limiter.limit("60/minute")
def mute_room_member(
    request: Request,
    command: schemas.MuteRoomMemberCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Mute a member in one room (moderator or room moderator)."""
    return RoomService.mute_room_member(db, caller, command, settings).to_response()


@router.post("/actions/kickRoomMember")
@limiter.limit("60/minute")
def kick_room_member(
    request: Request,
    command: schemas.KickRoomMemberCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Remove a member from a room (moderator or room moderator)."""
    return RoomService.kick_room_member(db, caller, command, settings).to_response()


@router.post("/actions/clearRoomMessages")
@limiter.limit("20/minute")
def clear_room_messages(
    request: Request,
    command: schemas.ClearRoomMessagesCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Soft-delete recent room messages (moderator or room moderator)."""
    return RoomService.clear_room_messages(db, caller, command, settings).to_response()


@router.post("/actions/saveRoom")
@limiter.limit("30/minute")
def save_room(
    request: Request,
    command: schemas.SaveRoomCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Create or update a room (admin)."""
    return RoomService.save_room(db, caller, command, settings).to_response()


@router.post("/actions/deleteRoom")
@limiter.limit("10/minute")
def delete_room(
    request: Request,
    command: schemas.DeleteRoomCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Delete a room with its messages and memberships (admin)."""
    return RoomService.delete_room(db, caller, command, settings).to_response()


# ============================================================================
# Reports
# ============================================================================


@router.post("/actions/assignReport")
@limiter.limit("60/minute")
def assign_report(
    request: Request,
    command: schemas.AssignReportCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Assign a report for review (moderator)."""
    return ReportService.assign_report(db, caller, command, settings).to_response()


@router.post("/actions/resolveReport")
@limiter.limit("60/minute")
def resolve_report(
    request: Request,
    command: schemas.ResolveReportCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Change a report's status (moderator)."""
    return ReportService.resolve_report(db, caller, command, settings).to_response()


# ============================================================================
# Announcements
# ============================================================================


@router.post("/actions/saveAnnouncement")
@limiter.limit("30/minute")
def save_announcement(
    request: Request,
    command: schemas.SaveAnnouncementCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Create or update an announcement (admin)."""
    return AnnouncementService.save_announcement(db, caller, command, settings).to_response()


@router.post("/actions/deleteAnnouncement")
@limiter.limit("30/minute")
def delete_announcement(
    request: Request,
    command: schemas.DeleteAnnouncementCommand,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Delete an announcement (admin)."""
    return AnnouncementService.delete_announcement(
        db, caller, command, settings
    ).to_response()


# ============================================================================
# Read-only views
# ============================================================================


@router.get(
    "/users/{user_id}/sanctions",
    response_model=list[schemas.SanctionResponse],
    summary="List a user's sanctions",
)
@limiter.limit("60/minute")
def get_user_sanctions(
    request: Request,
    user_id: str,
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 50,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> list:
    """Sanction history of one user, newest first (moderator)."""
    sanctions, _ = SanctionService.get_user_sanctions(
        db, caller, user_id, settings, skip=skip, limit=limit
    )
    return sanctions


@router.get(
    "/audit-logs",
    response_model=schemas.AuditLogListResponse,
    summary="List audit log entries",
)
@limiter.limit("30/minute")
def get_audit_logs(
    request: Request,
    actor_id: Optional[str] = Query(None, alias="actorId"),
    action: Optional[str] = Query(None),
    object_type: Optional[str] = Query(None, alias="objectType"),
    object_id: Optional[str] = Query(None, alias="objectId"),
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    db: Session = Depends(get_db),
    caller: schemas.Caller = Depends(auth.get_caller),
    settings: Settings = Depends(get_settings),
) -> dict:
    """
    Browse the audit log, newest first (admin).

    Filters combine with AND.
    """
    AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)
    entries, total = AuditService.get_logs(
        db,
        actor_id=actor_id,
        action=action,
        object_type=object_type,
        object_id=object_id,
        limit=limit,
        offset=skip,
    )
    return {"items": entries, "total": total}
