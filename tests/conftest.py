"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.db import Database
from app.domains.issues.snapshot import SnapshotHub
from app.main import create_app

PASSWORD = "Secret123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'issues.db'}",
        jwt_secret="test-secret",
        log_level="WARNING",
    )


@pytest.fixture
async def database(settings: Settings) -> AsyncGenerator[Database]:
    """Create a database with all tables."""
    db = Database(settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database: Database) -> AsyncGenerator[AsyncSession]:
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def hub() -> SnapshotHub:
    """Create a fresh SnapshotHub."""
    return SnapshotHub()


@pytest.fixture
def client(settings: Settings) -> Generator[TestClient]:
    """Create a test client with the application lifespan running."""
    app = create_app(settings)
    with TestClient(app) as client:
        yield client


def login(client: TestClient, email: str, password: str = PASSWORD) -> str:
    """Register a user and return an access token."""
    response = client.post("/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest.fixture
def token(client: TestClient) -> str:
    return login(client, "alice@example.com")


@pytest.fixture
def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
