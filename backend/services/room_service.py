"""
Service for room administration and room-scoped moderation.

Room-scoped moderation (mute, kick, clear messages) is open to global
moderators and to the room's own moderators. Creating, deleting and
staffing rooms is admin-only.
"""

from loguru import logger
from sqlalchemy.orm import Session

from authentication.auth import hash_passcode
from helpers.durations import limit_or_default, minutes_or_default
from helpers.time_utils import format_iso8601, minutes_from_now, utc_now
from models.config import Settings
from models.exceptions import RoomNotFoundException
from models.results import ActionResult
from models.schemas import (
    AssignRoomModeratorCommand,
    Caller,
    ClearRoomMessagesCommand,
    DeleteRoomCommand,
    KickRoomMemberCommand,
    MuteRoomMemberCommand,
    SaveRoomCommand,
)
from repositories.db_models import MemberRole, Room, UserRole
from repositories.room_repository import (
    RoomMemberRepository,
    RoomMessageRepository,
    RoomRepository,
)
from services.audit_service import AuditAction, AuditService
from services.authority_service import AuthorityService


class RoomService:
    """Service for room operations."""

    @staticmethod
    def _get_room_or_raise(db: Session, room_id: str) -> Room:
        room = RoomRepository(db).get_by_id(room_id)
        if room is None:
            raise RoomNotFoundException(room_id)
        return room

    @staticmethod
    def _authorize_room_moderation(
        db: Session, caller: Caller, room_id: str, settings: Settings
    ) -> Room:
        """
        Check moderator authority for a room-scoped action, then load the room.

        Callers without rights get a 403 whether or not the room exists.
        """
        room = RoomRepository(db).get_by_id(room_id)
        AuthorityService.require_role(db, caller, UserRole.MODERATOR, settings, room=room)
        if room is None:
            raise RoomNotFoundException(room_id)
        return room

    @staticmethod
    def _audit(
        db: Session,
        caller: Caller,
        result: ActionResult,
        room_id: str,
        details: dict,
    ) -> ActionResult:
        failure = AuditService.record(db, caller, result.action, "room", room_id, details)
        if failure:
            result.side_effect_failures.append(failure)
        return result

    @staticmethod
    def assign_room_moderator(
        db: Session,
        caller: Caller,
        command: AssignRoomModeratorCommand,
        settings: Settings,
    ) -> ActionResult:
        """
        Add or remove a room moderator. Requires admin.

        Keeps the room's moderator set and the user's membership role in step;
        the membership is created if the user was not yet a member.
        """
        AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)
        room = RoomService._get_room_or_raise(db, command.room_id)

        member = RoomMemberRepository(db).get_or_create_member(room.id, command.user_id)
        if command.assign:
            RoomRepository.add_moderator_id(room, command.user_id)
            member.role = MemberRole.MODERATOR
        else:
            RoomRepository.remove_moderator_id(room, command.user_id)
            member.role = MemberRole.MEMBER
        room.updated_at = utc_now()
        db.commit()

        result = ActionResult(
            action=AuditAction.ASSIGN_ROOM_MODERATOR,
            data={"roomId": room.id, "userId": command.user_id, "assigned": command.assign},
        )
        return RoomService._audit(
            db,
            caller,
            result,
            room.id,
            {"userId": command.user_id, "assign": command.assign},
        )

    @staticmethod
    def mute_room_member(
        db: Session,
        caller: Caller,
        command: MuteRoomMemberCommand,
        settings: Settings,
    ) -> ActionResult:
        """
        Mute or unmute a member inside one room.

        Only the membership changes; the user's global status is untouched.
        """
        room = RoomService._authorize_room_moderation(db, caller, command.room_id, settings)

        member = RoomMemberRepository(db).get_or_create_member(room.id, command.user_id)
        minutes = None
        if command.muted:
            minutes = minutes_or_default(
                command.duration_minutes,
                settings.DEFAULT_MUTE_MINUTES,
                settings.MAX_SANCTION_MINUTES,
            )
            member.muted = True
            member.muted_until = minutes_from_now(minutes)
        else:
            member.muted = False
            member.muted_until = None
        db.commit()

        result = ActionResult(
            action=AuditAction.MUTE_ROOM_MEMBER,
            data={
                "roomId": room.id,
                "userId": command.user_id,
                "muted": member.muted,
                "mutedUntil": format_iso8601(member.muted_until),
            },
        )
        return RoomService._audit(
            db,
            caller,
            result,
            room.id,
            {"userId": command.user_id, "muted": command.muted, "durationMinutes": minutes},
        )

    @staticmethod
    def kick_room_member(
        db: Session,
        caller: Caller,
        command: KickRoomMemberCommand,
        settings: Settings,
    ) -> ActionResult:
        """Remove a member from a room. Kicking a non-member is a no-op write."""
        room = RoomService._authorize_room_moderation(db, caller, command.room_id, settings)

        member_repo = RoomMemberRepository(db)
        member = member_repo.get_member(room.id, command.user_id)
        removed = member is not None
        if member is not None:
            member_repo.delete(member)
            member_repo.commit()

        result = ActionResult(
            action=AuditAction.KICK_ROOM_MEMBER,
            data={"roomId": room.id, "userId": command.user_id, "removed": removed},
        )
        return RoomService._audit(db, caller, result, room.id, {"userId": command.user_id})

    @staticmethod
    def clear_room_messages(
        db: Session,
        caller: Caller,
        command: ClearRoomMessagesCommand,
        settings: Settings,
    ) -> ActionResult:
        """
        Soft-delete the most recent visible messages of a room.

        The count defaults to DEFAULT_CLEAR_MESSAGES_LIMIT and is capped at
        MAX_CLEAR_MESSAGES_LIMIT. Already deleted messages are not counted.
        """
        room = RoomService._authorize_room_moderation(db, caller, command.room_id, settings)

        limit = limit_or_default(
            command.limit,
            settings.DEFAULT_CLEAR_MESSAGES_LIMIT,
            settings.MAX_CLEAR_MESSAGES_LIMIT,
        )
        message_repo = RoomMessageRepository(db)
        messages = message_repo.get_recent_visible(room.id, limit)
        RoomMessageRepository.soft_delete(messages, deleted_by=caller.uid, when=utc_now())
        message_repo.commit()

        result = ActionResult(
            action=AuditAction.CLEAR_ROOM_MESSAGES,
            data={"roomId": room.id, "cleared": len(messages)},
        )
        return RoomService._audit(
            db, caller, result, room.id, {"limit": limit, "cleared": len(messages)}
        )

    @staticmethod
    def save_room(
        db: Session,
        caller: Caller,
        command: SaveRoomCommand,
        settings: Settings,
    ) -> ActionResult:
        """
        Create a room or update an existing one. Requires admin.

        A passcode is stored only as a bcrypt hash; an empty passcode removes
        it and an omitted one leaves it unchanged.
        """
        AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)

        room_repo = RoomRepository(db)
        fields = {
            "name": command.name,
            "description": command.description,
            "visibility": command.visibility,
        }
        if command.passcode is not None:
            fields["passcode_hash"] = (
                hash_passcode(command.passcode) if command.passcode else None
            )

        if command.room_id:
            room, created = room_repo.upsert(command.room_id, fields)
        else:
            room = Room(**fields)
            room_repo.add(room)
            created = True

        now = utc_now()
        if created:
            room.created_by = caller.uid
            room.created_at = now
        room.updated_at = now
        room_repo.commit()
        room_repo.refresh(room)

        result = ActionResult(
            action=AuditAction.SAVE_ROOM,
            data={"roomId": room.id, "created": created},
        )
        return RoomService._audit(
            db,
            caller,
            result,
            room.id,
            {
                "name": room.name,
                "visibility": room.visibility.value,
                "created": created,
                "hasPasscode": room.passcode_hash is not None,
            },
        )

    @staticmethod
    def delete_room(
        db: Session,
        caller: Caller,
        command: DeleteRoomCommand,
        settings: Settings,
    ) -> ActionResult:
        """
        Delete a room and everything in it. Requires admin.

        Messages go first, then memberships, then the room itself, each in
        pages of DELETE_BATCH_SIZE until nothing is left.
        """
        AuthorityService.require_role(db, caller, UserRole.ADMIN, settings)
        room = RoomService._get_room_or_raise(db, command.room_id)
        room_id = room.id
        batch_size = settings.DELETE_BATCH_SIZE

        message_repo = RoomMessageRepository(db)
        messages_deleted = 0
        while True:
            deleted = message_repo.delete_page(room_id, batch_size)
            if not deleted:
                break
            messages_deleted += deleted

        member_repo = RoomMemberRepository(db)
        members_deleted = 0
        while True:
            deleted = member_repo.delete_page(room_id, batch_size)
            if not deleted:
                break
            members_deleted += deleted

        room_repo = RoomRepository(db)
        room_repo.delete(room)
        room_repo.commit()
        logger.info(
            f"Deleted room {room_id}: {messages_deleted} messages, "
            f"{members_deleted} members"
        )

        result = ActionResult(
            action=AuditAction.DELETE_ROOM,
            data={
                "roomId": room_id,
                "messagesDeleted": messages_deleted,
                "membersDeleted": members_deleted,
            },
        )
        return RoomService._audit(
            db,
            caller,
            result,
            room_id,
            {"messagesDeleted": messages_deleted, "membersDeleted": members_deleted},
        )
