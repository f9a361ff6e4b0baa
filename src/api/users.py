"""User account and session API endpoints."""

from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from pydantic import EmailStr
from sqlalchemy.orm import Session

from src.api.dependencies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_current_user,
    get_media_storage,
)
from src.config import get_settings
from src.database import get_db
from src.models.user import User
from src.schemas.auth import (
    AccountUpdate,
    ChangePasswordRequest,
    LoginResponse,
    RefreshTokenRequest,
    TokenPairResponse,
    UserLogin,
    UserResponse,
)
from src.schemas.envelope import ApiResponse
from src.schemas.subscription import ChannelProfileResponse
from src.services import auth as auth_service
from src.services.media import MediaStorageService, save_upload
from src.services.subscriptions import get_channel_profile
from src.services.tokens import TokenPair

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _set_session_cookies(response: Response, tokens: TokenPair) -> None:
    secure = get_settings().cookie_secure
    response.set_cookie(ACCESS_TOKEN_COOKIE, tokens.access_token, httponly=True, secure=secure)
    response.set_cookie(REFRESH_TOKEN_COOKIE, tokens.refresh_token, httponly=True, secure=secure)


def _clear_session_cookies(response: Response) -> None:
    secure = get_settings().cookie_secure
    response.delete_cookie(ACCESS_TOKEN_COOKIE, httponly=True, secure=secure)
    response.delete_cookie(REFRESH_TOKEN_COOKIE, httponly=True, secure=secure)


def _discard(*paths: Path | None) -> None:
    """Remove temp files that were not consumed by an upload."""
    for path in paths:
        if path is not None:
            path.unlink(missing_ok=True)


@router.post(
    "/register",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    db: Annotated[Session, Depends(get_db)],
    media: Annotated[MediaStorageService, Depends(get_media_storage)],
    fullname: Annotated[str | None, Form(max_length=255)] = None,
    email: Annotated[EmailStr | None, Form(max_length=255)] = None,
    username: Annotated[str | None, Form(max_length=64)] = None,
    password: Annotated[str | None, Form(max_length=128)] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
):
    """Register a new user with an avatar and optional cover image.

    Must remain async because UploadFile.read() is async.
    """
    avatar_path: Path | None = None
    cover_image_path: Path | None = None
    try:
        avatar_path = await save_upload(avatar) if avatar else None
        cover_image_path = await save_upload(cover_image) if cover_image else None
        user = await auth_service.register_user(
            db,
            media,
            auth_service.RegistrationData(
                full_name=fullname, email=email, username=username, password=password
            ),
            avatar_path,
            cover_image_path,
        )
    finally:
        _discard(avatar_path, cover_image_path)

    return ApiResponse.ok(
        UserResponse.model_validate(user),
        message="User registered successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(
    credentials: UserLogin,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with username or email and password.

    Tokens are set as http-only cookies and also returned in the body.
    """
    user = auth_service.authenticate_user(
        db, credentials.username, credentials.email, credentials.password
    )
    tokens = auth_service.issue_token_pair(db, user)
    _set_session_cookies(response, tokens)

    return ApiResponse.ok(
        LoginResponse(
            user=UserResponse.model_validate(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        ),
        message="User logged in successfully",
    )


@router.post("/logout", response_model=ApiResponse[dict])
def logout(
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Invalidate the stored refresh token and clear session cookies."""
    auth_service.revoke_refresh_token(db, current_user)
    _clear_session_cookies(response)
    return ApiResponse.ok({}, message="User logged out")


@router.post("/refresh-token", response_model=ApiResponse[TokenPairResponse])
def refresh_token(
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    payload: RefreshTokenRequest | None = None,
):
    """Exchange the current refresh token (cookie or body) for a new pair."""
    incoming = request.cookies.get(REFRESH_TOKEN_COOKIE) or (
        payload.refresh_token if payload else None
    )
    _, tokens = auth_service.rotate_refresh_token(db, incoming)
    _set_session_cookies(response, tokens)

    return ApiResponse.ok(
        TokenPairResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token),
        message="Access token refreshed",
    )


@router.post("/change-password", response_model=ApiResponse[dict])
def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Change the current user's password."""
    auth_service.change_password(db, current_user, body.old_password, body.new_password)
    return ApiResponse.ok({}, message="Password changed successfully")


@router.get("/current-user", response_model=ApiResponse[UserResponse])
def get_current_user_profile(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return ApiResponse.ok(
        UserResponse.model_validate(current_user), message="Current user fetched successfully"
    )


@router.patch("/account", response_model=ApiResponse[UserResponse])
def update_account(
    body: AccountUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update the current user's full name and email."""
    user = auth_service.update_account(db, current_user, body.full_name, body.email)
    return ApiResponse.ok(
        UserResponse.model_validate(user), message="Account details updated successfully"
    )


@router.patch("/avatar", response_model=ApiResponse[UserResponse])
async def update_avatar(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    media: Annotated[MediaStorageService, Depends(get_media_storage)],
    avatar: Annotated[UploadFile | None, File()] = None,
):
    """Replace the current user's avatar."""
    path = await save_upload(avatar) if avatar else None
    try:
        user = await auth_service.update_avatar(db, media, current_user, path)
    finally:
        _discard(path)
    return ApiResponse.ok(UserResponse.model_validate(user), message="Avatar updated successfully")


@router.patch("/cover-image", response_model=ApiResponse[UserResponse])
async def update_cover_image(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    media: Annotated[MediaStorageService, Depends(get_media_storage)],
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
):
    """Replace the current user's cover image."""
    path = await save_upload(cover_image) if cover_image else None
    try:
        user = await auth_service.update_cover_image(db, media, current_user, path)
    finally:
        _discard(path)
    return ApiResponse.ok(
        UserResponse.model_validate(user), message="Cover image updated successfully"
    )


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfileResponse])
def channel_profile(
    username: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a channel's public profile with subscriber counts."""
    profile = get_channel_profile(db, username, current_user)
    return ApiResponse.ok(
        ChannelProfileResponse.model_validate(profile), message="Channel fetched successfully"
    )
