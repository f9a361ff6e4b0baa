"""User model."""

from sqlalchemy import Column, Integer, String

from src.database import Base
from src.models.mixins import TimestampMixin
from src.services.passwords import hash_password, verify_password


class User(Base, TimestampMixin):
    """Account record holding identity, profile and session state.

    ``refresh_token`` is a single slot: only the most recently issued refresh
    token is accepted for this user.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False, index=True)
    avatar = Column(String(1024), nullable=False)
    cover_image = Column(String(1024), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    refresh_token = Column(String(1024), nullable=True)

    @property
    def password(self) -> str:
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, plaintext: str) -> None:
        self.password_hash = hash_password(plaintext)

    def is_password_correct(self, plaintext: str) -> bool:
        """Check a plaintext password against the stored hash."""
        return verify_password(plaintext, self.password_hash)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
