"""Pydantic schemas for API request/response validation."""

from src.schemas.auth import (
    AccountUpdate,
    ChangePasswordRequest,
    LoginResponse,
    RefreshTokenRequest,
    TokenPairResponse,
    UserLogin,
    UserResponse,
)
from src.schemas.envelope import ApiResponse, ErrorResponse
from src.schemas.subscription import (
    ChannelProfileResponse,
    SubscriptionResponse,
    UnsubscribeResponse,
)

__all__ = [
    "AccountUpdate",
    "ApiResponse",
    "ChangePasswordRequest",
    "ChannelProfileResponse",
    "ErrorResponse",
    "LoginResponse",
    "RefreshTokenRequest",
    "SubscriptionResponse",
    "TokenPairResponse",
    "UnsubscribeResponse",
    "UserLogin",
    "UserResponse",
]
