"""Integration-test fixtures.

Requires a migrated PostgreSQL at DATABASE_URL (alembic upgrade head).
The whole module is skipped when the database is unreachable.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.
"""

import uuid
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.dx_common.database import async_session_factory, check_connection
from src.dx_gateway.auth.jwt_handler import create_access_token
from src.main import app

ADMIN_EMAIL = "admin@dorm.test"

_UPSERT_USER_SQL = text("""
    INSERT INTO users (id, email, name, room_number)
    VALUES (CAST(:id AS UUID), :email, :name, :room)
    ON CONFLICT (email) DO UPDATE SET name = EXCLUDED.name
    RETURNING id
""")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    try:
        await check_connection()
    except Exception as exc:
        pytest.skip(f"database not available: {exc}")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _upsert_user(email: str, name: str) -> SimpleNamespace:
    async with async_session_factory() as session:
        result = await session.execute(
            _UPSERT_USER_SQL,
            {"id": str(uuid.uuid4()), "email": email, "name": name, "room": "B-214"},
        )
        user_id = str(result.scalar_one())
        await session.commit()
    token = create_access_token(user_id)
    return SimpleNamespace(
        id=user_id, email=email, name=name,
        headers={"Authorization": f"Bearer {token}"},
    )


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def make_user(client):
    """Factory: a fresh resident with a signed token on every call."""

    async def _make(name: str = "Resident") -> SimpleNamespace:
        return await _upsert_user(f"{uuid.uuid4().hex[:12]}@dorm.test", name)

    return _make


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin(client) -> SimpleNamespace:
    return await _upsert_user(ADMIN_EMAIL, "Dorm Admin")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def sql(client):
    """Run one statement in its own committed transaction; returns fetched rows."""

    async def _run(statement: str, **params):
        async with async_session_factory() as session:
            result = await session.execute(text(statement), params)
            rows = result.fetchall() if result.returns_rows else []
            await session.commit()
        return rows

    return _run
