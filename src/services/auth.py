"""Account and session lifecycle: registration, login, logout, refresh, profile."""

import logging
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import func, or_
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.orm import Session

from src.exceptions import (
    AuthError,
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
)
from src.models.user import User
from src.services.media import MediaStorageService
from src.services.tokens import (
    TokenPair,
    create_token_pair,
    decode_refresh_token,
    user_id_from_claims,
)

logger = logging.getLogger(__name__)


@dataclass
class RegistrationData:
    """Text fields of a registration form."""

    full_name: str | None
    email: str | None
    username: str | None
    password: str | None


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def _require(**fields: str | None) -> None:
    """Raise ValidationError naming every field that is missing or blank."""
    missing = [name for name, value in fields.items() if value is None or not value.strip()]
    if missing:
        raise ValidationError("All fields are required", errors=missing)


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Get a user by primary key."""
    return db.get(User, user_id)


def get_user_by_username_or_email(
    db: Session, username: str | None = None, email: str | None = None
) -> User | None:
    """Get the first user matching either identifier (case-insensitive)."""
    conditions = []
    if username and username.strip():
        conditions.append(func.lower(User.username) == _normalize(username))
    if email and email.strip():
        conditions.append(func.lower(User.email) == _normalize(email))
    if not conditions:
        return None
    return db.query(User).filter(or_(*conditions)).first()


def _commit(db: Session, conflict_message: str) -> None:
    """Commit, translating constraint violations into client errors."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(conflict_message) from e
    except DataError as e:
        db.rollback()
        raise ValidationError("Field value is too long or malformed") from e


async def register_user(
    db: Session,
    media: MediaStorageService,
    data: RegistrationData,
    avatar_path: Path | None,
    cover_image_path: Path | None = None,
) -> User:
    """Create a new user, uploading the avatar and optional cover image."""
    _require(
        fullname=data.full_name,
        email=data.email,
        username=data.username,
        password=data.password,
    )

    username = _normalize(data.username)
    email = _normalize(data.email)

    if get_user_by_username_or_email(db, username=username, email=email):
        raise ConflictError("User with email or username already exists")

    if not avatar_path:
        raise ValidationError("Avatar file is required")

    avatar = await media.upload(avatar_path)
    if avatar is None:
        raise DependencyError("Failed to upload avatar")

    cover_image = await media.upload(cover_image_path) if cover_image_path else None
    if cover_image_path and cover_image is None:
        logger.warning(f"Cover image upload failed during registration of '{username}'")

    user = User(
        username=username,
        email=email,
        full_name=data.full_name.strip(),
        avatar=avatar.url,
        cover_image=cover_image.url if cover_image else "",
    )
    user.password = data.password
    db.add(user)
    _commit(db, "User with email or username already exists")
    db.refresh(user)

    logger.info(f"Registered user {user.id} ('{user.username}')")
    return user


def authenticate_user(
    db: Session, username: str | None, email: str | None, password: str | None
) -> User:
    """Resolve a user by username or email and check the password."""
    if not (username and username.strip()) and not (email and email.strip()):
        raise ValidationError("Username or email is required")
    if not password:
        raise ValidationError("Password is required")

    user = get_user_by_username_or_email(db, username=username, email=email)
    if not user:
        raise NotFoundError("User does not exist")

    if not user.is_password_correct(password):
        logger.warning(f"Rejected login for user {user.id}: wrong password")
        raise AuthError("Invalid user credentials")

    return user


def _mint_tokens(user: User) -> TokenPair:
    try:
        return create_token_pair(user)
    except Exception as e:
        logger.exception(f"Failed to issue tokens for user {user.id}")
        raise DependencyError(
            "Something went wrong while generating access and refresh tokens"
        ) from e


def issue_token_pair(db: Session, user: User) -> TokenPair:
    """Mint a token pair and make its refresh token the user's current session.

    The previous refresh token, if any, stops being accepted.
    """
    tokens = _mint_tokens(user)
    user.refresh_token = tokens.refresh_token
    db.commit()
    logger.info(f"Issued session tokens for user {user.id}")
    return tokens


def revoke_refresh_token(db: Session, user: User) -> None:
    """Clear the stored refresh token so the session cannot be refreshed."""
    db.query(User).filter(User.id == user.id).update(
        {User.refresh_token: None}, synchronize_session=False
    )
    db.commit()
    db.refresh(user)
    logger.info(f"User {user.id} logged out")


def rotate_refresh_token(db: Session, refresh_token: str | None) -> tuple[User, TokenPair]:
    """Exchange the current refresh token for a new pair.

    The write is conditional on the stored token still being the one
    presented, so a token can be rotated at most once.
    """
    if not refresh_token:
        raise AuthError("Unauthorized request")

    claims = decode_refresh_token(refresh_token)
    user = get_user_by_id(db, user_id_from_claims(claims))
    if not user:
        raise AuthError("Invalid refresh token")

    if user.refresh_token != refresh_token:
        logger.warning(f"Stale refresh token presented for user {user.id}")
        raise AuthError("Refresh token is expired or used")

    tokens = _mint_tokens(user)
    updated = (
        db.query(User)
        .filter(User.id == user.id, User.refresh_token == refresh_token)
        .update({User.refresh_token: tokens.refresh_token}, synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        logger.warning(f"Refresh token for user {user.id} was rotated concurrently")
        raise AuthError("Refresh token is expired or used")

    db.commit()
    db.refresh(user)
    logger.info(f"Rotated refresh token for user {user.id}")
    return user, tokens


def change_password(db: Session, user: User, old_password: str, new_password: str) -> None:
    """Replace the user's password after checking the current one."""
    if not user.is_password_correct(old_password):
        logger.warning(f"Rejected password change for user {user.id}: wrong old password")
        raise AuthError("Invalid old password")
    if not new_password or not new_password.strip():
        raise ValidationError("New password is required")

    user.password = new_password
    db.commit()
    logger.info(f"User {user.id} changed password")


def update_account(db: Session, user: User, full_name: str | None, email: str | None) -> User:
    """Update the display name and email."""
    _require(fullName=full_name, email=email)

    email = _normalize(email)
    other = db.query(User).filter(func.lower(User.email) == email, User.id != user.id).first()
    if other:
        raise ConflictError("Email is already in use")

    user.full_name = full_name.strip()
    user.email = email
    _commit(db, "Email is already in use")
    db.refresh(user)
    return user


async def _replace_image(
    db: Session,
    media: MediaStorageService,
    user: User,
    local_path: Path | None,
    field: str,
    label: str,
) -> User:
    if not local_path:
        raise ValidationError(f"{label} file is missing")

    uploaded = await media.upload(local_path)
    if uploaded is None:
        raise DependencyError(f"Error while uploading {label.lower()}")

    setattr(user, field, uploaded.url)
    db.commit()
    db.refresh(user)
    logger.info(f"Updated {field} for user {user.id}")
    return user


async def update_avatar(
    db: Session, media: MediaStorageService, user: User, local_path: Path | None
) -> User:
    """Upload a replacement avatar and store its URL."""
    return await _replace_image(db, media, user, local_path, "avatar", "Avatar")


async def update_cover_image(
    db: Session, media: MediaStorageService, user: User, local_path: Path | None
) -> User:
    """Upload a replacement cover image and store its URL."""
    return await _replace_image(db, media, user, local_path, "cover_image", "Cover image")
