"""
Sentry SDK configuration.

Initialised only when SENTRY_DSN is set. Events are scrubbed of personal
data and of secrets this service handles: bearer tokens, the trigger
secret and device push tokens.
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.loguru import LoguruIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.types import Event, Hint

FILTERED = "[Filtered]"
SENSITIVE_HEADERS = {"authorization", "x-trigger-secret", "cookie"}
# Keys whose values are device tokens or credentials
SENSITIVE_KEYS = {"token", "tokens", "fcm_token", "fcm_tokens", "passcode", "passcode_hash"}


def _scrub(value: Any) -> Any:
    """Recursively replace sensitive values in dicts and lists."""
    if isinstance(value, dict):
        return {
            k: FILTERED if str(k).lower() in SENSITIVE_KEYS else _scrub(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [_scrub(v) for v in value]
    return value


def _before_send(event: Event, hint: Hint) -> Event | None:
    """
    Scrub PII and secrets before sending to Sentry.

    Keeps only the user id for traceability.
    """
    user = event.get("user")
    if user:
        user.pop("email", None)
        user.pop("username", None)
        if "ip_address" in user:
            user["ip_address"] = "{{auto}}"

    request = event.get("request")
    if request and isinstance(request, dict):
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for name in list(headers):
                if name.lower() in SENSITIVE_HEADERS:
                    headers[name] = FILTERED
        if "data" in request:
            request["data"] = _scrub(request["data"])

    extra = event.get("extra")
    if isinstance(extra, dict):
        event["extra"] = _scrub(extra)

    return event


def _before_send_transaction(event: Event, hint: Hint) -> Event | None:
    """Drop health-check transactions."""
    transaction_name = event.get("transaction", "")
    if transaction_name in ["/api/health", "GET /api/health"]:
        return None
    return event


def _traces_sampler(sampling_context: dict[str, Any]) -> float:
    """
    Sample rate per route.

    Admin actions are rare and worth tracing; triggers are high volume.
    """
    if sampling_context.get("parent_sampled") is True:
        return 1.0

    asgi_scope = sampling_context.get("asgi_scope", {})
    path = asgi_scope.get("path", "")

    if path == "/api/health":
        return 0.0
    if path.startswith("/api/admin") or path.startswith("/api/maintenance"):
        return 0.5
    if path.startswith("/api/triggers"):
        return 0.05
    return 0.2


def init_sentry() -> None:
    """
    Initialize Sentry with FastAPI, SQLAlchemy and Loguru integrations.

    Call before creating the FastAPI app. No-op without SENTRY_DSN.
    """
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=os.getenv("SENTRY_RELEASE", "unknown"),
        send_default_pii=False,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoguruIntegration(),
        ],
        traces_sampler=_traces_sampler,
        sample_rate=1.0,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[KeyboardInterrupt, SystemExit],
    )
