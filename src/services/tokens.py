"""JWT issuing and verification for access and refresh tokens."""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from src.config import get_settings
from src.exceptions import AuthError
from src.models.user import User

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"  # noqa: S105
REFRESH_TOKEN_TYPE = "refresh"  # noqa: S105


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token minted together for one user."""

    access_token: str
    refresh_token: str


def _encode(claims: dict[str, Any], secret: str, lifetime: timedelta) -> str:
    settings = get_settings()
    now = datetime.now(UTC)
    to_encode = {
        **claims,
        "iat": now,
        "exp": now + lifetime,
        # Distinguishes tokens minted for the same user within the same second
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)


def _decode(token: str, secret: str, expected_type: str) -> dict[str, Any]:
    settings = get_settings()
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise AuthError(f"{expected_type.capitalize()} token has expired") from e
    except JWTError as e:
        raise AuthError(f"Invalid {expected_type} token") from e

    if payload.get("type") != expected_type or payload.get("sub") is None:
        raise AuthError(f"Invalid {expected_type} token")
    return payload


def create_access_token(user: User) -> str:
    """Create a short-lived access token carrying the user's identity."""
    settings = get_settings()
    return _encode(
        {
            "sub": str(user.id),
            "email": user.email,
            "username": user.username,
            "full_name": user.full_name,
            "type": ACCESS_TOKEN_TYPE,
        },
        settings.access_token_secret,
        timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(user: User) -> str:
    """Create a long-lived refresh token carrying only the user id."""
    settings = get_settings()
    return _encode(
        {"sub": str(user.id), "type": REFRESH_TOKEN_TYPE},
        settings.refresh_token_secret,
        timedelta(days=settings.refresh_token_expire_days),
    )


def create_token_pair(user: User) -> TokenPair:
    """Mint an access/refresh token pair bound to the same user."""
    return TokenPair(
        access_token=create_access_token(user),
        refresh_token=create_refresh_token(user),
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token, raising AuthError on failure."""
    return _decode(token, get_settings().access_token_secret, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict[str, Any]:
    """Decode and validate a refresh token, raising AuthError on failure."""
    return _decode(token, get_settings().refresh_token_secret, REFRESH_TOKEN_TYPE)


def user_id_from_claims(payload: dict[str, Any]) -> int:
    """Extract the numeric user id from decoded claims."""
    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Token carried a malformed subject claim")
        raise AuthError("Invalid token subject") from e
