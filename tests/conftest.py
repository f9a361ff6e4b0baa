"""Pytest configuration and fixtures."""

import os
import tempfile
from pathlib import Path

os.environ.setdefault("UPLOAD_TEMP_DIR", tempfile.mkdtemp(prefix="account-uploads-"))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.api.dependencies import get_media_storage  # noqa: E402
from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.services.media import MediaUpload  # noqa: E402

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class AuthHeaders(dict):
    """Dict subclass that also stores the registered user's details."""

    def __init__(self, *args, user_id: int | None = None, username: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.username = username


class FakeMediaStorage:
    """In-memory stand-in for the Cloudinary client."""

    def __init__(self) -> None:
        self.fail = False
        # Fail only uploads whose file name contains this marker
        self.fail_for: str | None = None
        self.uploaded: list[str] = []

    async def upload(self, local_path):
        if not local_path:
            return None
        path = Path(local_path)
        try:
            if self.fail or (self.fail_for and self.fail_for in path.name):
                return None
            self.uploaded.append(path.name)
            return MediaUpload(url=f"https://media.test/{path.name}")
        finally:
            path.unlink(missing_ok=True)


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace("/accounts", "/accounts_test")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def media():
    return FakeMediaStorage()


@pytest.fixture(scope="function")
def client(db, media):
    """Create a test client with database and media storage overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_storage] = lambda: media
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, username="alice", email="alice@x.com", password="pw123", **extra):
    """Register a user through the API with a PNG avatar."""
    files = {"avatar": ("avatar.png", PNG_BYTES, "image/png")}
    if extra.pop("cover", False):
        files["coverImage"] = ("cover.png", PNG_BYTES, "image/png")
    if extra.pop("no_avatar", False):
        files.pop("avatar")
    data = {
        "fullname": extra.pop("fullname", "Alice Example"),
        "email": email,
        "username": username,
        "password": password,
    }
    return client.post("/api/v1/users/register", data=data, files=files or None)


def login(client, username="alice", password="pw123", email=None):
    body = {"password": password}
    if username:
        body["username"] = username
    if email:
        body["email"] = email
    return client.post("/api/v1/users/login", json=body)


@pytest.fixture
def auth_headers(client):
    """Register and log in a user, returning bearer auth headers."""
    response = register(client)
    assert response.status_code == 201

    response = login(client)
    assert response.status_code == 200
    data = response.json()["data"]

    return AuthHeaders(
        {"Authorization": f"Bearer {data['accessToken']}"},
        user_id=data["user"]["id"],
        username=data["user"]["username"],
    )
