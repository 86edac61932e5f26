"""
Typed request/response schemas.

Every admin action and every trigger kind has its own model, so arguments
are validated once, at the boundary, when the model is constructed.
RPC payloads use camelCase keys (``userId``, ``durationMinutes``);
snake_case names are accepted as well.
"""

from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from repositories.db_models import (
    AnnouncementScope,
    AnnouncementStatus,
    RoomVisibility,
    SanctionType,
    UserRole,
)

RequiredId = Annotated[str, Field(min_length=1, max_length=128)]


class RpcModel(BaseModel):
    """Base for RPC payloads: camelCase on the wire, immutable once parsed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# --- Caller identity ---


class Caller(BaseModel):
    """Authenticated caller, derived from the bearer credential."""

    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    claims: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


# --- User sanction commands ---


class SetUserRoleCommand(RpcModel):
    user_id: RequiredId
    role: UserRole


class MuteUserCommand(RpcModel):
    user_id: RequiredId
    # Loosely typed on purpose: invalid values fall back to the default duration
    duration_minutes: Any = None
    reason: str = Field(default="", max_length=2000)


class UnmuteUserCommand(RpcModel):
    user_id: RequiredId


class BanUserCommand(RpcModel):
    user_id: RequiredId
    duration_minutes: Any = None
    reason: str = Field(default="", max_length=2000)


class UnbanUserCommand(RpcModel):
    user_id: RequiredId


class ShadowBanUserCommand(RpcModel):
    user_id: RequiredId
    enabled: bool = True
    reason: str = Field(default="", max_length=2000)


# --- Room commands ---


class AssignRoomModeratorCommand(RpcModel):
    room_id: RequiredId
    user_id: RequiredId
    assign: bool = True


class MuteRoomMemberCommand(RpcModel):
    room_id: RequiredId
    user_id: RequiredId
    duration_minutes: Any = None
    muted: bool = True


class KickRoomMemberCommand(RpcModel):
    room_id: RequiredId
    user_id: RequiredId


class ClearRoomMessagesCommand(RpcModel):
    room_id: RequiredId
    limit: Any = None


class SaveRoomCommand(RpcModel):
    room_id: Optional[str] = Field(default=None, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    visibility: RoomVisibility = RoomVisibility.PUBLIC
    # None keeps the stored passcode, "" removes it
    passcode: Optional[str] = Field(default=None, max_length=128)


class DeleteRoomCommand(RpcModel):
    room_id: RequiredId


# --- Report commands ---


class AssignReportCommand(RpcModel):
    report_id: RequiredId
    moderator_id: Optional[str] = None


class ResolveReportCommand(RpcModel):
    report_id: RequiredId
    # Unrecognised values resolve the report
    status: Any = None
    notes: Optional[str] = Field(default=None, max_length=4000)
    actions: List[str] = Field(default_factory=list)


# --- Announcement commands ---


class SaveAnnouncementCommand(RpcModel):
    announcement_id: Optional[str] = Field(default=None, max_length=64)
    title: str = Field(..., min_length=1, max_length=300)
    body: str = Field(default="", max_length=10000)
    scope: AnnouncementScope = AnnouncementScope.GLOBAL
    room_id: Optional[str] = None
    status: AnnouncementStatus = AnnouncementStatus.DRAFT
    publish_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_room_scope(self) -> "SaveAnnouncementCommand":
        """Room-scoped announcements need a room."""
        if self.scope == AnnouncementScope.ROOM and not self.room_id:
            raise ValueError("roomId is required for room-scoped announcements")
        return self


class DeleteAnnouncementCommand(RpcModel):
    announcement_id: RequiredId


# --- Trigger events ---


class ChatMessageCreated(RpcModel):
    kind: Literal["chat_message.created"]
    document_id: RequiredId


class CommentLikeCreated(RpcModel):
    kind: Literal["comment_like.created"]
    document_id: RequiredId


class FollowCreated(RpcModel):
    kind: Literal["follow.created"]
    document_id: RequiredId


class NotificationCreated(RpcModel):
    kind: Literal["notification.created"]
    document_id: RequiredId


TriggerEvent = Annotated[
    Union[ChatMessageCreated, CommentLikeCreated, FollowCreated, NotificationCreated],
    Field(discriminator="kind"),
]


class TriggerEnvelope(BaseModel):
    """Body of the trigger endpoint."""

    event: TriggerEvent


# --- Responses ---


class SanctionResponse(RpcModel):
    id: str
    user_id: str
    type: SanctionType
    reason: str
    metadata: dict[str, Any] = Field(validation_alias="metadata_")
    actor_id: str
    actor_name: Optional[str]
    created_at: datetime
    expires_at: Optional[datetime]

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class AuditLogResponse(RpcModel):
    id: int
    actor_id: str
    actor_name: Optional[str]
    action: str
    object_type: str
    object_id: str
    details: dict[str, Any]
    created_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class AuditLogListResponse(RpcModel):
    items: List[AuditLogResponse]
    total: int


class BackfillResponse(BaseModel):
    success: bool
    message: str
    updated: int
    timestamp: datetime
