"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session. Tests are skipped when PostgreSQL is unreachable.
"""

import uuid
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.main import app
from src.pm_common.database import async_session_factory


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1 FROM markets LIMIT 1"))
    except (OSError, SQLAlchemyError) as exc:
        pytest.skip(f"database unavailable: {exc}")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def funded_user(client: AsyncClient) -> str:
    """Fresh user with a $1,000 balance; user creation has no HTTP endpoint."""
    user_id = f"it-{uuid.uuid4().hex[:12]}"
    async with async_session_factory() as session:
        await session.execute(
            text("INSERT INTO users (id, username) VALUES (:id, :id)"), {"id": user_id}
        )
        await session.execute(
            text("INSERT INTO user_balances (user_id, balance) VALUES (:id, :bal)"),
            {"id": user_id, "bal": Decimal("1000")},
        )
        await session.commit()
    return user_id
