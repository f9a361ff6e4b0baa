"""Subscription schemas."""

from datetime import datetime

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from src.schemas.envelope import CamelModel


class SubscriptionResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    subscriber_id: int
    channel_id: int
    created_at: datetime | None = None


class UnsubscribeResponse(CamelModel):
    channel_id: int
    removed: int


class ChannelProfileResponse(CamelModel):
    """A user's public channel view with subscription counts."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    username: str
    full_name: str
    email: str
    avatar: str
    cover_image: str | None = ""
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool
