"""
Pytest fixtures for One World backend tests.
"""

import os
from collections.abc import AsyncGenerator
from datetime import timedelta
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment variables before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("ADMIN_SESSION_SECRET", "test-admin-session-secret")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Any, None]:
    """Fresh SQLite database file with all tables created."""
    from db.session import Database

    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'oneworld_test.db'}")
    db.open()
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
async def app(database: Any) -> AsyncGenerator[Any, None]:
    """FastAPI application wired to the test database."""
    from main import app as fastapi_app

    fastapi_app.state.database = database
    yield fastapi_app
    fastapi_app.state.database = None


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Create mock database session."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    return session


async def _create_user(database: Any, email: str, role: Any, password: str = "correct-horse-battery") -> Any:
    from core.security import hash_password
    from repositories.user_repository import UserRepository

    async with database.transaction() as session:
        return await UserRepository(session).create(
            email=email,
            password_hash=hash_password(password),
            name=email.split("@")[0].title(),
            role=role,
        )


@pytest.fixture
def make_user(database: Any) -> Any:
    """Factory creating regular users with a given email."""
    from models.user import UserRole

    async def _make(email: str, role: Any = UserRole.USER) -> Any:
        return await _create_user(database, email, role)

    return _make


@pytest.fixture
async def voter(database: Any) -> Any:
    """A regular app user."""
    from models.user import UserRole

    return await _create_user(database, "voter@example.com", UserRole.USER)


@pytest.fixture
async def other_voter(database: Any) -> Any:
    from models.user import UserRole

    return await _create_user(database, "second.voter@example.com", UserRole.USER)


@pytest.fixture
async def admin(database: Any) -> Any:
    """An admin user (password ``correct-horse-battery``)."""
    from models.user import UserRole

    return await _create_user(database, "admin@example.com", UserRole.ADMIN)


def bearer_headers(user: Any) -> dict[str, str]:
    """Authorization header with a valid access token for ``user``."""
    from core.security import create_access_token

    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> Any:
    """``auth_headers(user)`` builds bearer headers for any user."""
    return bearer_headers


@pytest.fixture
def voter_headers(voter: Any) -> dict[str, str]:
    return bearer_headers(voter)


@pytest.fixture
def admin_headers(admin: Any) -> dict[str, str]:
    return bearer_headers(admin)


@pytest.fixture
async def projects(database: Any) -> list[Any]:
    """Five projects to build votings from."""
    from models.project import Project

    titles = ["Brunnen in Kenia", "Schule in Nepal", "Solaranlage Ghana", "Klinik Peru", "Wald Borneo"]
    async with database.transaction() as session:
        rows = [Project(title=title, description=f"{title} description") for title in titles]
        session.add_all(rows)
    return rows


@pytest.fixture
def voting_service(database: Any) -> Any:
    from services.voting_service import VotingService

    return VotingService(database)


@pytest.fixture
def settings_service(database: Any) -> Any:
    from services.settings_service import SettingsService

    return SettingsService(database)


@pytest.fixture
def window() -> tuple[Any, Any]:
    """A date window that started a minute ago and runs for seven days."""
    from db.types import utcnow

    now = utcnow()
    return now - timedelta(minutes=1), now + timedelta(days=7)


@pytest.fixture
async def active_voting(voting_service: Any, projects: list[Any], admin: Any, window: tuple[Any, Any]) -> Any:
    """An open voting over the first three projects."""
    start, end = window
    voting = await voting_service.create_voting(
        title="Welches Projekt starten wir im Mai?",
        description=None,
        start_date=start,
        end_date=end,
        project_ids=[p.id for p in projects[:3]],
        created_by=admin.id,
    )
    return await voting_service.update_voting(voting.id, {"status": "active"})
