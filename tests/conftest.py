"""Pytest configuration and fixtures."""
import os
import uuid
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

TEST_DB_PATH = Path("test_app.db")
if TEST_DB_PATH.exists():
    TEST_DB_PATH.unlink()

TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("LOG_FORMAT", "text")

from duetasks.main import app  # noqa: E402
from duetasks.core.exceptions import StorageError  # noqa: E402
from duetasks.database import Base, get_db  # noqa: E402
from duetasks.dependencies import get_clock  # noqa: E402
from duetasks.models.user import User  # noqa: E402
from duetasks.services import attachment_service as attachment_module  # noqa: E402
from duetasks.services.auth_service import AuthService  # noqa: E402
from duetasks.services.board_service import board_sessions  # noqa: E402
from duetasks.utils.clock import Clock  # noqa: E402
from duetasks.utils.security import create_access_token  # noqa: E402

FIXED_NOW = datetime(2024, 1, 1, 8, 0)


# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def make_task(title="Task", due_at="2024-01-01T09:00", completed=False, task_id=None, **extra):
    """Lightweight stand-in for a task row, for engine tests without a database."""
    return SimpleNamespace(
        id=task_id or uuid.uuid4(),
        title=title,
        description=extra.pop("description", None),
        due_at=due_at,
        completed=completed,
        in_progress=extra.pop("in_progress", False),
        attachments=extra.pop("attachments", []),
        created_at=None,
        **extra,
    )


class FakeStorage:
    """In-memory object store recording every call."""

    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.fail_uploads = False
        self.fail_deletes = False

    def upload_fileobj(self, file_obj, key, content_type=None, bucket=None):
        if self.fail_uploads:
            raise StorageError(detail="Error uploading file: boom")
        self.objects[(bucket, key)] = (file_obj.read(), content_type)
        return True

    def delete_file(self, key, bucket=None):
        if self.fail_deletes:
            raise StorageError(detail="Error deleting file: boom")
        self.objects.pop((bucket, key), None)
        self.deleted.append((bucket, key))
        return True

    def generate_download_url(self, key, expires_in=60, bucket=None):
        return f"https://storage.test/{bucket}/{key}?expires={expires_in}"


@pytest_asyncio.fixture(scope="function")
async def db_session():
    """Create a test database session."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def fixed_clock():
    """Clock pinned to FIXED_NOW."""
    return Clock(source=lambda: FIXED_NOW)


@pytest.fixture
def fake_storage(monkeypatch):
    storage = FakeStorage()
    monkeypatch.setattr(attachment_module, "storage_service", storage)
    return storage


@pytest.fixture(scope="function")
def client(db_session: AsyncSession, fixed_clock: Clock, fake_storage: FakeStorage):
    """Create a test client overriding database and clock dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    board_sessions.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    board_sessions.reset()


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession):
    """Create a test user."""
    user = User(
        id=uuid.uuid4(),
        email="test@example.com",
        password_hash=AuthService.hash_password("testpassword"),
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession):
    user = User(
        id=uuid.uuid4(),
        email="other@example.com",
        password_hash=AuthService.hash_password("otherpassword"),
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


def headers_for(user: User) -> dict:
    token = create_access_token({"sub": str(user.id), "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client, test_user):
    """Get authentication headers."""
    return headers_for(test_user)


@pytest.fixture
def other_headers(client, other_user):
    return headers_for(other_user)


@pytest.fixture
def task_factory():
    return make_task
