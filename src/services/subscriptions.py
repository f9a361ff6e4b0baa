"""Subscription relation between users."""

import logging
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.exceptions import NotFoundError, ValidationError
from src.models.subscription import Subscription
from src.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class ChannelProfile:
    """A channel's public fields plus its subscription counts."""

    id: int
    username: str
    full_name: str
    email: str
    avatar: str
    cover_image: str
    subscribers_count: int
    channels_subscribed_to_count: int
    is_subscribed: bool


def _get_channel(db: Session, channel_id: int) -> User:
    channel = db.get(User, channel_id)
    if not channel:
        raise NotFoundError("Channel does not exist")
    return channel


def subscribe(db: Session, subscriber: User, channel_id: int) -> Subscription:
    """Create a subscriber -> channel edge."""
    if subscriber.id == channel_id:
        raise ValidationError("Users cannot subscribe to their own channel")

    channel = _get_channel(db, channel_id)
    subscription = Subscription(subscriber_id=subscriber.id, channel_id=channel.id)
    db.add(subscription)
    db.commit()
    db.refresh(subscription)

    logger.info(f"User {subscriber.id} subscribed to channel {channel.id}")
    return subscription


def unsubscribe(db: Session, subscriber: User, channel_id: int) -> int:
    """Remove every subscriber -> channel edge and return how many were deleted."""
    removed = (
        db.query(Subscription)
        .filter(Subscription.subscriber_id == subscriber.id, Subscription.channel_id == channel_id)
        .delete(synchronize_session=False)
    )
    if removed == 0:
        db.rollback()
        raise NotFoundError("Subscription not found")

    db.commit()
    logger.info(f"User {subscriber.id} unsubscribed from channel {channel_id}")
    return removed


def get_channel_profile(db: Session, username: str | None, viewer: User) -> ChannelProfile:
    """Build the channel profile for ``username`` as seen by ``viewer``.

    Counts are over distinct users, so duplicate edges are not double counted.
    """
    if not username or not username.strip():
        raise ValidationError("Username is missing")

    channel = (
        db.query(User).filter(func.lower(User.username) == username.strip().lower()).first()
    )
    if not channel:
        raise NotFoundError("Channel does not exist")

    subscribers_count = (
        db.query(func.count(func.distinct(Subscription.subscriber_id)))
        .filter(Subscription.channel_id == channel.id)
        .scalar()
    )
    subscribed_to_count = (
        db.query(func.count(func.distinct(Subscription.channel_id)))
        .filter(Subscription.subscriber_id == channel.id)
        .scalar()
    )
    is_subscribed = (
        db.query(Subscription.id)
        .filter(Subscription.channel_id == channel.id, Subscription.subscriber_id == viewer.id)
        .first()
        is not None
    )

    return ChannelProfile(
        id=channel.id,
        username=channel.username,
        full_name=channel.full_name,
        email=channel.email,
        avatar=channel.avatar,
        cover_image=channel.cover_image or "",
        subscribers_count=subscribers_count or 0,
        channels_subscribed_to_count=subscribed_to_count or 0,
        is_subscribed=is_subscribed,
    )
