"""Test fixtures — an isolated app + database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own Settings and passes them to create_app(), so
   the engine, session factory and token signer all live on that app's
   state. Nothing leaks between tests through module globals.
2. The database is a fresh SQLite file under tmp_path (aiosqlite driver),
   with tables created straight from the ORM metadata. Point
   TAGBLAZE_TEST_DATABASE_URL at a PostgreSQL database to run the same
   suite against asyncpg; tables are dropped and re-created per test.
3. Requests go through httpx's ASGITransport, so the full middleware
   stack and exception handlers run — no dependency overrides.
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tagblaze.config import Settings
from tagblaze.db.models import Base
from tagblaze.main import create_app

TEST_DB_URL = os.environ.get("TAGBLAZE_TEST_DATABASE_URL")
TEST_SECRET = "test-secret-not-for-production"
TEST_PASSWORD = "pw-123456"


@pytest.fixture()
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=TEST_DB_URL or f"sqlite+aiosqlite:///{tmp_path / 'tagblaze.db'}",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        environment="test",
        enable_dev_routes=True,
        log_level="WARNING",
    )


@pytest_asyncio.fixture()
async def app(test_settings):
    """FastAPI app with empty tables, disposed after the test."""
    app = create_app(test_settings)
    engine = app.state.engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield app

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client wired straight into the ASGI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def db_session(app):
    """A session from the app's own factory, for service-level tests."""
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture()
def session_factory(app):
    return app.state.session_factory


@pytest.fixture()
def signer(app):
    return app.state.token_signer


@pytest.fixture()
def login_as(client):
    """Register a user through the API and return auth headers for them.

    Learn: Tests exercise the real register → login → bearer pipeline
    instead of overriding the guard, so every protected-route test also
    covers token issuing and verification.
    """

    async def _login_as(role: str = "agent", email: str | None = None) -> dict:
        email = email or f"{role}-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/auth/register",
            json={
                "email": email,
                "name": f"Test {role.title()}",
                "password": TEST_PASSWORD,
                "role": role,
            },
        )
        assert r.status_code == 201, r.text
        r = await client.post(
            "/auth/login", json={"email": email, "password": TEST_PASSWORD}
        )
        assert r.status_code == 200, r.text
        return {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _login_as


@pytest_asyncio.fixture()
async def agent_headers(login_as):
    return await login_as("agent")


@pytest_asyncio.fixture()
async def admin_headers(login_as):
    return await login_as("admin")
