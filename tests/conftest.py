"""Test configuration and fixtures.

Every test that touches the database gets a fresh in-memory SQLite
database:
1. ``.env.test`` points DATABASE_URL at ``sqlite+aiosqlite:///:memory:``
2. ``init_db()`` creates the schema and seeds Alice (user) and Bob (admin)
3. ``close_db()`` disposes the single shared connection, dropping everything

All sessions share that one connection, so fixtures commit their writes
immediately instead of relying on rollback isolation.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Load test environment variables before the application reads its settings
test_env_path = Path(__file__).parent.parent / ".env.test"
load_dotenv(test_env_path, override=True)

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from src.config.settings import settings  # noqa: E402
from src.database.client import close_db, get_session, init_db  # noqa: E402
from src.features.auth.jwt_utils import create_access_token  # noqa: E402
from src.features.realtime.hub import ChannelHub, get_hub  # noqa: E402
from src.features.user.models import User, UserRole  # noqa: E402
from src.main import app  # noqa: E402

DEMO_PASSWORD = "password123"


# Database


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None]:
    """Fresh, seeded in-memory database for one test."""
    await init_db()
    yield
    await close_db()


@pytest_asyncio.fixture
async def session(database) -> AsyncGenerator[AsyncSession]:
    """Database session for arranging and inspecting state directly."""
    async with get_session() as db_session:
        yield db_session


# Realtime hub


@pytest.fixture
def hub():
    """Isolated ChannelHub wired into the app in place of the global one."""
    test_hub = ChannelHub()
    app.dependency_overrides[get_hub] = lambda: test_hub
    yield test_hub
    app.dependency_overrides.pop(get_hub, None)


# Uploads


@pytest.fixture
def upload_dir(tmp_path, monkeypatch) -> Path:
    """Point file storage at a per-test temporary directory."""
    directory = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(directory))
    return directory


# FastAPI Client


@pytest_asyncio.fixture
async def client(database) -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP test client.

    The client is unauthenticated; pass ``headers=auth_headers(user)`` for
    protected endpoints.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Test User Factories


@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory fixture to create committed test users.

    Usage:
        user = await make_user()                        # defaults
        admin = await make_user(role=UserRole.ADMIN)    # admin
    """
    counter = 0

    async def _factory(
        name: str = "Test User",
        email: str | None = None,
        password: str = "TestPass123!",
        role: UserRole = UserRole.USER,
    ) -> User:
        nonlocal counter
        counter += 1

        user = User(
            name=name,
            email=email or f"testuser{counter}@example.com",
            hashed_password=User.hash_password(password),
            role=role,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _factory


@pytest.fixture
def auth_headers():
    """Build an ``Authorization`` header carrying a fresh access token for a user."""

    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(user.id, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def alice(session: AsyncSession) -> User:
    """Seeded regular user (id 1)."""
    from src.features.user.service import UserService

    user = await UserService.get_user_by_email(session, "alice@example.com")
    assert user is not None
    return user


@pytest_asyncio.fixture
async def bob(session: AsyncSession) -> User:
    """Seeded admin user (id 2)."""
    from src.features.user.service import UserService

    user = await UserService.get_user_by_email(session, "bob@example.com")
    assert user is not None
    return user
