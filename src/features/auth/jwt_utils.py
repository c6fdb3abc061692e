"""JWT utilities for authentication (token service).

Access tokens are standard three-segment JWTs signed with HMAC-SHA256 and
carry ``{userId, email, role, iat, exp}``. Nothing about them is stored
server-side; a leaked token stays valid until ``exp``.
"""

import logging
import secrets
import time
from typing import Any

import jwt
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError

from src.config.settings import settings

from .schemas import TokenPayload

logger = logging.getLogger(__name__)


def _now(now: int | None) -> int:
    return int(time.time()) if now is None else now


def create_access_token(user_id: int, email: str, role: str, now: int | None = None) -> str:
    """Create a signed JWT access token.

    Args:
        user_id: ID of the token owner
        email: Email of the token owner
        role: Role of the token owner
        now: Issue time in epoch seconds (defaults to the current time)

    Returns:
        Encoded JWT token string

    """
    issued_at = _now(now)
    payload: dict[str, Any] = {
        "userId": user_id,
        "email": email,
        "role": str(role),
        "iat": issued_at,
        "exp": issued_at + settings.access_token_expire_seconds,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm, headers={"typ": "JWT"})


def decode_access_token(token: str, now: int | None = None) -> TokenPayload | None:
    """Verify a JWT access token and return its payload.

    The signature is checked by PyJWT (constant-time comparison); the token
    is valid only while ``exp > now``. Any failure, whether a malformed
    structure, a bad signature, an expired token or an unexpected payload
    shape, returns None instead of raising.

    Args:
        token: JWT token string
        now: Verification time in epoch seconds (defaults to the current time)

    Returns:
        Decoded payload or None

    """
    try:
        raw = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "iat"], "verify_exp": False, "verify_iat": False},
        )
        payload = TokenPayload.model_validate(raw)
    except (InvalidTokenError, ValidationError) as exc:
        logger.debug(f"Rejected access token: {exc.__class__.__name__}")
        return None

    if payload.exp <= _now(now):
        logger.debug("Rejected access token: expired")
        return None

    return payload


def create_refresh_token() -> str:
    """Create a high-entropy opaque refresh token.

    The caller persists it with its owner and expiry.
    """
    return secrets.token_urlsafe(48)
