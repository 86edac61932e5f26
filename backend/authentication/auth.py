from datetime import datetime, timedelta, timezone
import hmac
from typing import Any, Optional

import bcrypt
from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt

from models.config import Settings, get_settings
from models.exceptions import AuthenticationException, InvalidTriggerSecretException
from models.schemas import Caller

optional_bearer_scheme = HTTPBearer(auto_error=False)

# Registered JWT claims; everything else is treated as a custom claim
_REGISTERED_CLAIMS = {"sub", "exp", "iat", "nbf", "iss", "aud", "jti", "email", "name"}


def verify_passcode(plain_passcode: str, hashed_passcode: str) -> bool:
    return bcrypt.checkpw(plain_passcode.encode(), hashed_passcode.encode())


def hash_passcode(passcode: str) -> str:
    return bcrypt.hashpw(passcode.encode(), bcrypt.gensalt()).decode()


def create_access_token(
    settings: Settings,
    uid: str,
    email: Optional[str] = None,
    name: Optional[str] = None,
    claims: Optional[dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    to_encode: dict[str, Any] = dict(claims or {})
    to_encode["sub"] = uid
    if email:
        to_encode["email"] = email
    if name:
        to_encode["name"] = name
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_caller(token: str, settings: Settings) -> Caller:
    """
    Build a Caller from a bearer token.

    Raises:
        AuthenticationException: If the token is invalid, expired or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.exceptions.ExpiredSignatureError:
        raise AuthenticationException("Token has expired")
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Could not validate credentials")

    uid = payload.get("sub")
    if not uid:
        raise AuthenticationException("Could not validate credentials")

    return Caller(
        uid=str(uid),
        email=payload.get("email"),
        name=payload.get("name"),
        claims={k: v for k, v in payload.items() if k not in _REGISTERED_CLAIMS},
    )


async def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        optional_bearer_scheme
    ),
    settings: Settings = Depends(get_settings),
) -> Caller:
    """
    Get the authenticated caller from the bearer token.

    Raises:
        AuthenticationException: If no credentials are sent or they are invalid.
    """
    if credentials is None:
        raise AuthenticationException("Authentication required")
    return decode_caller(credentials.credentials, settings)


async def verify_trigger_secret(
    x_trigger_secret: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Guard internal endpoints with the shared trigger secret.

    No check is made when TRIGGER_SECRET is empty (local development).
    """
    if not settings.TRIGGER_SECRET:
        return
    if not x_trigger_secret or not hmac.compare_digest(
        x_trigger_secret.encode(), settings.TRIGGER_SECRET.encode()
    ):
        raise InvalidTriggerSecretException()
