"""Fixtures for API tests: the real app bound to an in-memory ledger."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import get_session
from src.api.main import app
from src.application.ledger_session import LedgerSession


@pytest.fixture
async def client(session: LedgerSession) -> AsyncGenerator[AsyncClient, None]:
    """Async client whose requests all share the ``session`` fixture."""
    app.dependency_overrides[get_session] = lambda: session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def moura_60(client: AsyncClient) -> dict:
    """A Moura 60Ah line created through the API."""
    response = await client.post(
        "/api/inventory",
        json={"brand": "Moura", "amperage": 60, "quantity": 3, "min_stock": 2, "price": 450.0},
    )
    assert response.status_code == 201
    return response.json()
