"""Account and session schemas."""

from datetime import datetime

from pydantic import ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from src.schemas.envelope import CamelModel


class UserLogin(CamelModel):
    """Login request. Either username or email identifies the account."""

    username: str | None = Field(None, max_length=64)
    email: str | None = Field(None, max_length=255)
    password: str = Field(..., max_length=128)


class RefreshTokenRequest(CamelModel):
    """Refresh request body; the cookie takes precedence when both are sent."""

    refresh_token: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., max_length=128)
    new_password: str = Field(..., max_length=128)


class AccountUpdate(CamelModel):
    """Name/email update request."""

    full_name: str = Field(..., max_length=255)
    email: EmailStr = Field(..., max_length=255)


class UserResponse(CamelModel):
    """Public user fields. Password hash and refresh token are never included."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str | None = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str


class LoginResponse(TokenPairResponse):
    """Login payload: the user plus the freshly issued tokens."""

    user: UserResponse
