from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from leavedesk.api.deps import get_today
from leavedesk.db import get_session
from leavedesk.main import app
from leavedesk.models import SQLModel
from leavedesk.rate_limit import limiter

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

# A fixed "today" keeps notice, past-date and pro-ration rules deterministic.
TODAY = date(2024, 6, 15)

HR_HEADERS = {"X-User-Id": "1", "X-Role": "hr"}
EMPLOYEE_HEADERS = {"X-User-Id": "2", "X-Role": "employee"}


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """A fresh SQLite database file per test with all tables created."""
    _engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'leavedesk.db'}",
        connect_args={"timeout": 5},
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def _disable_rate_limit() -> Iterator[None]:
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
async def async_client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the session and calendar dependencies overridden.

    Every request gets its own session, as in production.
    """

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_today] = lambda: TODAY
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def employee_payload(
    name: str = "Arjun Sharma",
    email: str = "arjun.sharma@acme.com",
    department: str = "Engineering",
    joining_date: str = "2023-01-15",
) -> dict[str, Any]:
    return {"name": name, "email": email, "department": department, "joining_date": joining_date}


async def create_employee(client: AsyncClient, **overrides: Any) -> dict[str, Any]:
    """Register an employee through the API and return the response data."""
    resp = await client.post("/api/employees", json=employee_payload(**overrides), headers=HR_HEADERS)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]
