"""FastAPI dependencies for authentication and collaborators."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.exceptions import AuthError
from src.models.user import User
from src.services.media import MediaStorageService
from src.services.tokens import decode_access_token, user_id_from_claims

ACCESS_TOKEN_COOKIE = "accessToken"  # noqa: S105
REFRESH_TOKEN_COOKIE = "refreshToken"  # noqa: S105

security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the authenticated user from the bearer header or access token cookie.

    An explicit Authorization header takes precedence over the cookie.
    """
    token = credentials.credentials if credentials is not None else None
    if not token:
        token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise AuthError("Unauthorized request")

    payload = decode_access_token(token)
    user = db.get(User, user_id_from_claims(payload))
    if user is None:
        raise AuthError("Invalid access token")

    return user


def get_media_storage() -> MediaStorageService:
    """Get the media storage client."""
    return MediaStorageService()
