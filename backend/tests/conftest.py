"""
Murmur Backend — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the whole suite.
How:   Environment overrides are applied before any `murmur` import; each
       test then gets its own throw-away SQLite database (aiosqlite), a local
       media store in tmp_path, and optionally an HTTPX client wired to the
       FastAPI app through ASGITransport.

Fixture Hierarchy (all function-scoped):
    db_engine ─┬── db_session ── make_user      service-level tests
               └── test_client                  HTTP-level tests
    media_store                                 LocalMediaStore in tmp_path
    sample_image_bytes / sample_image_data_uri
"""

import base64
import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any murmur import)
# ══════════════════════════════════════════════════════════════════════════

_TEST_ROOT = tempfile.mkdtemp(prefix="murmur_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/health.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-not-for-production"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_ROOT, "storage")
os.environ["MEDIA_BACKEND"] = "local"
os.environ["BCRYPT_ROUNDS"] = "4"  # fastest bcrypt cost
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RETRY_MIN_WAIT"] = "0"
os.environ["RETRY_MAX_WAIT"] = "1"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from murmur.database import Base, commit_session, get_db_session, rollback_session  # noqa: E402
from murmur.dependencies import get_media_store  # noqa: E402
from murmur.models.notification import Notification  # noqa: E402,F401
from murmur.models.post import Comment, Like, Post  # noqa: E402,F401
from murmur.models.user import Follower, Following, User  # noqa: E402,F401
from murmur.security import hash_password  # noqa: E402
from murmur.services.media_service import LocalMediaStore  # noqa: E402

DEFAULT_PASSWORD = "secret123"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database file with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'murmur.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    A session for calling services directly.

    Usage:
        async def test_something(db_session, make_user):
            alice = await make_user("alice")
            result = await post_service.get_all_posts(db_session)
    """
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Factory that inserts a user with DEFAULT_PASSWORD and returns it."""

    async def _make_user(username: str, email: str = None, full_name: str = None) -> User:
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            full_name=full_name or username.capitalize(),
            password_hash=hash_password(DEFAULT_PASSWORD),
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make_user


# ══════════════════════════════════════════════════════════════════════════
# Media
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def media_store(tmp_path) -> LocalMediaStore:
    return LocalMediaStore(storage_root=str(tmp_path / "storage"), url_prefix="/api/media")


@pytest.fixture
def sample_image_bytes():
    """
    Smallest valid JPEG: SOI + JFIF APP0 header + EOI.

    Passes magic-byte sniffing as image/jpeg; not a viewable picture.
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_image_data_uri(sample_image_bytes):
    return "data:image/jpeg;base64," + base64.b64encode(sample_image_bytes).decode()


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(db_engine, media_store):
    """
    HTTPX AsyncClient talking to the app in-process.

    Each request gets its own session on the per-test database and commits
    like production. The client keeps cookies, so a register/login sets the
    session for the following calls.
    """
    from murmur.main import app

    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_db_session():
        async with factory() as session:
            try:
                yield session
                await commit_session(session)
            except Exception:
                await rollback_session(session)
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_media_store] = lambda: media_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://murmur.test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def register():
    """
    Register a user through the API; the client keeps the session cookie.

    Usage:
        alice = await register(test_client, "alice")
    """

    async def _register(client: AsyncClient, username: str, password: str = DEFAULT_PASSWORD):
        response = await client.post(
            "/api/auth/register",
            json={
                "fullName": username.capitalize(),
                "username": username,
                "email": f"{username}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register
