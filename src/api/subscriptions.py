"""Subscription API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user
from src.database import get_db
from src.models.user import User
from src.schemas.envelope import ApiResponse
from src.schemas.subscription import SubscriptionResponse, UnsubscribeResponse
from src.services import subscriptions as subscription_service

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


@router.post(
    "/{channel_id}",
    response_model=ApiResponse[SubscriptionResponse],
    status_code=status.HTTP_201_CREATED,
)
def subscribe(
    channel_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Subscribe the current user to a channel."""
    subscription = subscription_service.subscribe(db, current_user, channel_id)
    return ApiResponse.ok(
        SubscriptionResponse.model_validate(subscription),
        message="Subscribed successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.delete("/{channel_id}", response_model=ApiResponse[UnsubscribeResponse])
def unsubscribe(
    channel_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Unsubscribe the current user from a channel."""
    removed = subscription_service.unsubscribe(db, current_user, channel_id)
    return ApiResponse.ok(
        UnsubscribeResponse(channel_id=channel_id, removed=removed),
        message="Unsubscribed successfully",
    )
