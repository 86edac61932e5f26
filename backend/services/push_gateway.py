"""
Push gateway for device notifications.

Talks to Firebase Cloud Messaging over its HTTP v1 API. Every send, single
or batched, goes through ``send_multicast`` and yields one outcome per token,
so callers treat one device and many devices the same way.
"""

import asyncio
from typing import Any, Mapping

import httpx
from loguru import logger

from models.config import Settings
from models.results import DeliveryOutcome

# Error codes that mean the token will never work again
DEAD_TOKEN_CODES = (
    "registration-token-not-registered",
    "invalid-registration-token",
)

DISABLED_CODE = "messaging/disabled"
TIMEOUT_CODE = "messaging/timeout"
UNAVAILABLE_CODE = "messaging/unavailable"


def is_dead_token_error(error_code: str | None) -> bool:
    """Check whether a delivery error means the token should be removed."""
    if not error_code:
        return False
    return any(code in error_code for code in DEAD_TOKEN_CODES)


def stringify_data(data: Mapping[str, Any] | None) -> dict[str, str]:
    """
    Coerce a data payload to the string-only map the gateway accepts.

    None becomes "", booleans become "true"/"false", everything else str().
    """
    result: dict[str, str] = {}
    for key, value in (data or {}).items():
        if value is None:
            result[key] = ""
        elif isinstance(value, bool):
            result[key] = "true" if value else "false"
        else:
            result[key] = str(value)
    return result


def build_message(
    token: str,
    title: str,
    body: str,
    data: dict[str, str],
    channel_id: str,
) -> dict[str, Any]:
    """
    Build one FCM v1 message for a device token.

    Notifications from the same chat or forum collapse under a shared tag.
    """
    tag = data.get("chatId") or data.get("forumId") or "default"
    return {
        "token": token,
        "notification": {"title": title, "body": body},
        "data": data,
        "android": {
            "priority": "high",
            "notification": {
                "channel_id": channel_id,
                "click_action": "FLUTTER_NOTIFICATION_CLICK",
                "sound": "default",
                "tag": tag,
            },
        },
        "apns": {
            "payload": {"aps": {"sound": "default", "mutable-content": 1}},
        },
    }


def classify_fcm_error(status_code: int, payload: Any) -> str:
    """
    Map an FCM error response to a ``messaging/...`` error code.

    Args:
        status_code: HTTP status of the response
        payload: Decoded JSON body (may be anything on malformed replies)

    Returns:
        Error code string
    """
    status = ""
    if isinstance(payload, dict):
        error = payload.get("error") or {}
        if isinstance(error, dict):
            status = str(error.get("status") or "")
            for detail in error.get("details") or []:
                if isinstance(detail, dict) and detail.get("errorCode"):
                    status = str(detail["errorCode"])
                    break

    if status == "UNREGISTERED" or status_code == 404:
        return "messaging/registration-token-not-registered"
    if status == "INVALID_ARGUMENT":
        return "messaging/invalid-registration-token"
    if status:
        return f"messaging/{status.lower().replace('_', '-')}"
    return f"messaging/http-{status_code}"


class PushGateway:
    """Interface of a push delivery backend."""

    async def send_multicast(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, str],
    ) -> list[DeliveryOutcome]:
        """Send one notification to every token; one outcome per token, same order."""
        raise NotImplementedError


class NullPushGateway(PushGateway):
    """Gateway used when push is disabled or unconfigured. Delivers nothing."""

    async def send_multicast(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, str],
    ) -> list[DeliveryOutcome]:
        logger.debug(f"Push not configured, skipping {len(tokens)} token(s): {title}")
        return [
            DeliveryOutcome(token=token, success=False, error_code=DISABLED_CODE)
            for token in tokens
        ]


class FcmPushGateway(PushGateway):
    """Firebase Cloud Messaging HTTP v1 gateway."""

    def __init__(self, settings: Settings):
        self.base_url = settings.PUSH_API_URL.rstrip("/")
        self.project_id = settings.FCM_PROJECT_ID
        self.access_token = settings.FCM_ACCESS_TOKEN
        self.channel_id = settings.PUSH_CHANNEL_ID
        self.timeout = settings.PUSH_TIMEOUT_SECONDS

    @property
    def send_url(self) -> str:
        return f"{self.base_url}/v1/projects/{self.project_id}/messages:send"

    async def _send_one(
        self,
        client: httpx.AsyncClient,
        token: str,
        title: str,
        body: str,
        data: dict[str, str],
    ) -> DeliveryOutcome:
        message = build_message(token, title, body, data, self.channel_id)
        try:
            response = await client.post(
                self.send_url,
                json={"message": message},
                headers={"Authorization": f"Bearer {self.access_token}"},
            )
        except httpx.TimeoutException:
            logger.warning(f"FCM timeout sending to token {token[:12]}...")
            return DeliveryOutcome(token=token, success=False, error_code=TIMEOUT_CODE)
        except httpx.HTTPError as e:
            logger.warning(f"FCM transport error: {e}")
            return DeliveryOutcome(
                token=token, success=False, error_code=UNAVAILABLE_CODE
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_success:
            message_id = payload.get("name") if isinstance(payload, dict) else None
            return DeliveryOutcome(token=token, success=True, message_id=message_id)

        error_code = classify_fcm_error(response.status_code, payload)
        logger.info(f"FCM rejected token {token[:12]}...: {error_code}")
        return DeliveryOutcome(token=token, success=False, error_code=error_code)

    async def send_multicast(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, str],
    ) -> list[DeliveryOutcome]:
        if not tokens:
            return []

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            if len(tokens) == 1:
                # Single-device fast path: no task scheduling
                return [await self._send_one(client, tokens[0], title, body, data)]
            return list(
                await asyncio.gather(
                    *(self._send_one(client, t, title, body, data) for t in tokens)
                )
            )


def get_push_gateway(settings: Settings) -> PushGateway:
    """Pick the gateway matching the configuration."""
    if settings.push_configured:
        return FcmPushGateway(settings)
    return NullPushGateway()
