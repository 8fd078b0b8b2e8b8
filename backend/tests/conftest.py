"""Shared pytest fixtures for test suite"""
import os
import sys
import tempfile
import uuid
from pathlib import Path
from typing import Callable, Dict, Generator, List
from unittest.mock import patch

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Settings are read once at import, so the environment must be ready first
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="vidtube-test-uploads-"))

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from vidtube.main import app
from vidtube.db.session import get_db
from vidtube.db import redis as redis_module
from vidtube.models import Base
from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.services.auth_service import hash_password
from vidtube.services.storage.media_service import MediaAsset, get_media_host
from vidtube.services.token_service import create_access_token


TEST_PASSWORD = "TestPassword123!"

# SQLite in-memory database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"

# Create test engine with StaticPool for in-memory database
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FakeMediaHost:
    """In-memory stand-in for the S3-compatible media host"""

    public_base_url = "https://media.test"

    def __init__(self):
        self.uploaded: List[Dict] = []
        self.deleted: List[str] = []
        self.fail_uploads = False

    def upload(self, file_path: Path, folder: str):
        # Staged file must still exist while the host reads it
        self.uploaded.append({
            "path": file_path,
            "folder": folder,
            "existed": file_path.exists(),
            "content": file_path.read_bytes() if file_path.exists() else None,
        })
        if self.fail_uploads:
            return None
        url = f"{self.public_base_url}/{folder}/{uuid.uuid4().hex}{file_path.suffix}"
        duration = 42.5 if folder == "videos" else None
        return MediaAsset(url=url, duration=duration)

    def delete(self, url: str) -> bool:
        self.deleted.append(url)
        return True


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh SQLite in-memory database session for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def mock_redis():
    """Mock Redis client using fakeredis"""
    fake_redis = fakeredis.FakeStrictRedis(decode_responses=True)
    with patch.object(redis_module, '_client', fake_redis):
        yield fake_redis


@pytest.fixture(scope="function")
def media_host() -> FakeMediaHost:
    return FakeMediaHost()


@pytest.fixture(scope="function")
def upload_dir(tmp_path):
    """Point staged uploads at a per-test directory"""
    from vidtube.core.config import settings
    with patch.object(settings, 'UPLOAD_DIR', tmp_path):
        yield tmp_path


@pytest.fixture(scope="function")
def client(db_session: Session, mock_redis, media_host, upload_dir) -> Generator[TestClient, None, None]:
    """FastAPI test client with test database, mocked Redis and fake media host"""

    # Override get_db dependency to use test database
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close session here, handled by fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_host] = lambda: media_host

    try:
        # Disable OpenTelemetry and the real database during startup
        with patch('vidtube.main.initialize_otel', return_value=False):
            with patch('vidtube.main.instrument_sqlalchemy'):
                with patch('vidtube.main.init_db'):
                    with patch('vidtube.main.close_db'):
                        with TestClient(app) as test_client:
                            yield test_client
    finally:
        # Cleanup - always clear overrides
        app.dependency_overrides.clear()


def create_user(db: Session, user_name: str, email: str, password: str = TEST_PASSWORD,
                full_name: str = None) -> User:
    user = User(
        user_name=user_name,
        email=email,
        full_name=full_name or user_name.title(),
        avatar=f"https://media.test/avatars/{user_name}.png",
        password_hash=hash_password(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_user(db_session: Session) -> User:
    return create_user(db_session, "alice", "alice@example.com", full_name="Alice Adams")


@pytest.fixture(scope="function")
def test_user_2(db_session: Session) -> User:
    """Second user for ownership tests"""
    return create_user(db_session, "bob", "bob@example.com", full_name="Bob Brown")


@pytest.fixture(scope="function")
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Bearer header for any user, so one client can act as several users"""
    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _headers


@pytest.fixture(scope="function")
def authenticated_client(client: TestClient, test_user: User) -> TestClient:
    """Client carrying the accessToken/refreshToken cookies of test_user"""
    login_response = client.post(
        "/api/v1/users/login",
        json={"userName": test_user.user_name, "password": TEST_PASSWORD}
    )
    assert login_response.status_code == 200
    assert client.cookies.get("accessToken")
    return client


@pytest.fixture(scope="function")
def make_video(db_session: Session) -> Callable[..., Video]:
    def _make(owner: User, title: str = "Test video", is_published: bool = True, views: int = 0,
              duration: float = 10.0) -> Video:
        video = Video(
            owner_id=owner.id,
            title=title,
            description=f"{title} description",
            video_file=f"https://media.test/videos/{uuid.uuid4().hex}.mp4",
            thumbnail=f"https://media.test/thumbnails/{uuid.uuid4().hex}.png",
            is_published=is_published,
            views=views,
            duration=duration,
        )
        db_session.add(video)
        db_session.commit()
        db_session.refresh(video)
        return video
    return _make
