"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

Users and their device tokens, the social collections that raise
notifications, rooms, reports, announcements, sanctions and the audit log.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

# Enum values are stored by member name
user_role = sa.Enum("USER", "MODERATOR", "ADMIN", name="userrole")
user_status = sa.Enum("ACTIVE", "MUTED", "BANNED", "SHADOW_BANNED", name="userstatus")
sanction_type = sa.Enum("MUTE", "BAN", "SHADOW_BAN", name="sanctiontype")
room_visibility = sa.Enum("PUBLIC", "PRIVATE", name="roomvisibility")
member_role = sa.Enum("MEMBER", "MODERATOR", name="memberrole")
room_message_status = sa.Enum("VISIBLE", "DELETED", name="roommessagestatus")
report_status = sa.Enum("OPEN", "IN_REVIEW", "RESOLVED", "REJECTED", name="reportstatus")
announcement_scope = sa.Enum("GLOBAL", "ROOM", name="announcementscope")
announcement_status = sa.Enum(
    "DRAFT", "SCHEDULED", "PUBLISHED", "ARCHIVED", name="announcementstatus"
)


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=128), primary_key=True),
        sa.Column("display_name", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("fcm_token", sa.String(length=4096), nullable=True),
        sa.Column("fcm_tokens", sa.JSON(), nullable=False),
        sa.Column("status", user_status, nullable=False),
        sa.Column("shadow_banned", sa.Boolean(), nullable=False),
        sa.Column("muted_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("banned_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sanction_count", sa.Integer(), nullable=False),
        sa.Column("last_sanction_reason", sa.Text(), nullable=True),
        sa.Column("custom_claims", sa.JSON(), nullable=False),
        sa.Column("last_seen", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "sanctions",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("user_id", sa.String(length=128), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sanction_type, nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("actor_id", sa.String(length=128), nullable=False),
        sa.Column("actor_name", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_sanctions_user_created", "sanctions", ["user_id", "created_at"])

    op.create_table(
        "chats",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("participants", sa.JSON(), nullable=False),
        sa.Column("last_message_sender_name", sa.String(length=200), nullable=True),
    )

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("chat_id", sa.String(length=64), nullable=False),
        sa.Column("sender_id", sa.String(length=128), nullable=False),
        sa.Column("text", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_chat_messages_chat_id", "chat_messages", ["chat_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=True),
        sa.Column("title_id", sa.String(length=128), nullable=True),
        sa.Column("text", sa.Text(), nullable=True),
    )

    op.create_table(
        "comment_likes",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("comment_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
    )
    op.create_index("ix_comment_likes_comment_id", "comment_likes", ["comment_id"])

    op.create_table(
        "follows",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("follower_id", sa.String(length=128), nullable=False),
        sa.Column("following_id", sa.String(length=128), nullable=False),
    )
    op.create_index("ix_follows_following_id", "follows", ["following_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("recipient_uid", sa.String(length=128), nullable=True),
        sa.Column("sender_uid", sa.String(length=128), nullable=True),
        sa.Column("sender_name", sa.String(length=200), nullable=True),
        sa.Column("forum_id", sa.String(length=128), nullable=True),
        sa.Column("forum_name", sa.String(length=200), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("sent", sa.Boolean(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("visibility", room_visibility, nullable=False),
        sa.Column("passcode_hash", sa.String(length=200), nullable=True),
        sa.Column("moderator_ids", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "room_members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("role", member_role, nullable=False),
        sa.Column("muted", sa.Boolean(), nullable=False),
        sa.Column("muted_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("room_id", "user_id", name="uq_room_member_room_user"),
    )
    op.create_index("ix_room_members_room_id", "room_members", ["room_id"])

    op.create_table(
        "room_messages",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("room_id", sa.String(length=64), nullable=False),
        sa.Column("sender_id", sa.String(length=128), nullable=False),
        sa.Column("text", sa.Text(), nullable=True),
        sa.Column("status", room_message_status, nullable=False),
        sa.Column("deleted_by", sa.String(length=128), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_room_messages_room_created", "room_messages", ["room_id", "created_at"]
    )

    op.create_table(
        "reports",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("reporter_id", sa.String(length=128), nullable=True),
        sa.Column("target_type", sa.String(length=32), nullable=True),
        sa.Column("target_id", sa.String(length=128), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", report_status, nullable=False),
        sa.Column("assigned_to", sa.String(length=128), nullable=True),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("resolution_actions", sa.JSON(), nullable=False),
        sa.Column("resolved_by", sa.String(length=128), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "announcements",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("scope", announcement_scope, nullable=False),
        sa.Column("room_id", sa.String(length=64), nullable=True),
        sa.Column("status", announcement_status, nullable=False),
        sa.Column("publish_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(length=128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("actor_id", sa.String(length=128), nullable=False),
        sa.Column("actor_name", sa.String(length=200), nullable=True),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("object_type", sa.String(length=32), nullable=False),
        sa.Column("object_id", sa.String(length=128), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])
    op.create_index("ix_audit_logs_actor_created", "audit_logs", ["actor_id", "created_at"])
    op.create_index("ix_audit_logs_object", "audit_logs", ["object_type", "object_id"])


def downgrade():
    """Drop every table. Data loss; development only."""
    for table in (
        "audit_logs",
        "announcements",
        "reports",
        "room_messages",
        "room_members",
        "rooms",
        "notifications",
        "follows",
        "comment_likes",
        "comments",
        "chat_messages",
        "chats",
        "sanctions",
        "users",
    ):
        op.drop_table(table)
