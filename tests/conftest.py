"""Shared test fixtures."""

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.pm_common.database import get_db_session


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def mock_db_session() -> Iterator[MagicMock]:
    """Route every ``get_db_session`` dependency to one MagicMock session.

    For router tests whose services are patched out; nothing reaches Postgres.
    """
    session = MagicMock()

    async def _session():  # type: ignore[no-untyped-def]
        yield session

    app.dependency_overrides[get_db_session] = _session
    yield session
    app.dependency_overrides.pop(get_db_session, None)
