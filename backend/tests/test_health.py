from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from leavedesk.db import get_session
from leavedesk.main import app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


async def test_health_returns_envelope(async_client: AsyncClient) -> None:
    response = await async_client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "LeaveDesk is running"
    data = body["data"]
    assert data["status"] == "ok"
    assert data["database"] == "up"
    assert data["version"] == "0.1.0"
    assert data["environment"] == "development"


async def test_health_is_not_under_api_prefix(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/health")
    assert response.status_code == 404


async def test_health_degraded_on_db_failure() -> None:
    """GET /health reports degraded when the database is unreachable."""
    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.execute.side_effect = ConnectionError("DB unreachable")

    async def _broken_session() -> AsyncIterator[AsyncSession]:
        yield mock_session

    app.dependency_overrides[get_session] = _broken_session
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
        body = response.json()
        assert response.status_code == 200
        assert body["data"]["status"] == "degraded"
        assert body["data"]["database"] == "down"
    finally:
        app.dependency_overrides.clear()
