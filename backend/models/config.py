import os
import sys
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    For local development, load `.env` automatically so `SECRET_KEY` can be
    provided from `backend/.env` (convenience). **SECRET_KEY remains required**
    and must be set in production via environment variables.

    Do NOT auto-load `.env` when running under pytest or in CI (so tests
    that validate missing secrets continue to fail fast).
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'staging', 'production' or 'test'",
    )

    DATABASE_URL: str = "sqlite:///./data/notifier.db"
    SECRET_KEY: str = Field(
        ...,  # Required, no default
        description="JWT secret key - must be set via SECRET_KEY environment variable",
    )
    ALGORITHM: str = "HS256"
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Fallback admin allowlist, consulted only when the caller's user record
    # cannot be read.
    ADMIN_EMAILS: List[str] = Field(
        default=[],
        description="Emails treated as admins when the stored role is unavailable",
    )

    # Shared secret for trigger and maintenance endpoints (empty disables check)
    TRIGGER_SECRET: str = Field(
        default="",
        description="Value expected in the X-Trigger-Secret header",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    # Safety: avoid creating DB schema automatically unless explicitly enabled.
    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    # Performance settings
    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Push gateway (Firebase Cloud Messaging HTTP v1)
    PUSH_ENABLED: bool = Field(
        default=True,
        description="Enable/disable push delivery globally",
    )
    PUSH_API_URL: str = Field(
        default="https://fcm.googleapis.com",
        description="Base URL of the push gateway",
    )
    FCM_PROJECT_ID: str = Field(
        default="",
        description="Firebase project id used in the send endpoint",
    )
    FCM_ACCESS_TOKEN: str = Field(
        default="",
        description="OAuth2 bearer token for the FCM send endpoint",
    )
    PUSH_CHANNEL_ID: str = Field(
        default="chat_channel",
        description="Android notification channel id attached to every message",
    )
    PUSH_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="HTTP timeout for a single push request",
    )

    # Moderation defaults
    DEFAULT_MUTE_MINUTES: int = Field(
        default=30,
        description="Mute duration used when the supplied one is missing or invalid",
    )
    DEFAULT_BAN_MINUTES: int = Field(
        default=1440,
        description="Ban duration used when a supplied duration is invalid",
    )
    DEFAULT_CLEAR_MESSAGES_LIMIT: int = Field(
        default=50,
        description="Number of recent room messages cleared when no limit is given",
    )
    MAX_CLEAR_MESSAGES_LIMIT: int = Field(
        default=500,
        description="Upper bound on messages cleared by one command",
    )
    MAX_SANCTION_MINUTES: int = Field(
        default=5_256_000,
        description="Upper bound on mute and ban durations (ten years)",
    )

    # Bulk write batching
    DELETE_BATCH_SIZE: int = Field(
        default=400,
        description="Documents deleted per batch during cascading deletes",
    )
    BACKFILL_BATCH_SIZE: int = Field(
        default=400,
        description="Users updated per batch by the lastSeen backfill",
    )

    @field_validator("CORS_ORIGINS", "ADMIN_EMAILS", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | List[str]) -> List[str]:
        """Parse list settings from comma-separated strings."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("ADMIN_EMAILS")
    @classmethod
    def normalize_admin_emails(cls, v: List[str]) -> List[str]:
        """Compare allowlisted emails case-insensitively."""
        return [email.lower() for email in v]

    @property
    def push_configured(self) -> bool:
        """True when the FCM gateway has everything it needs to send."""
        return bool(
            self.PUSH_ENABLED
            and self.PUSH_API_URL
            and self.FCM_PROJECT_ID
            and self.FCM_ACCESS_TOKEN
        )

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
        frozen=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load settings once at process start (for dependency injection).

    Settings are frozen; services receive them explicitly instead of
    reading module state.
    """
    # Raises pydantic.ValidationError if SECRET_KEY isn't set.
    return Settings()  # type: ignore[call-arg]
