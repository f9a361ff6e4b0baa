"""Subscription model."""

from sqlalchemy import Column, ForeignKey, Integer
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class Subscription(Base, TimestampMixin):
    """Directed edge from a subscribing user to the channel (user) they follow.

    (subscriber_id, channel_id) is not unique; duplicate edges can exist.
    """

    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    subscriber_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    channel_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relationships
    subscriber = relationship("User", foreign_keys=[subscriber_id], backref="subscriptions")
    channel = relationship("User", foreign_keys=[channel_id], backref="subscribers")
