from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from leavedesk.config import get_settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _connect_args(database_url: str, timeout: float) -> dict[str, Any]:
    """Driver-level timeouts so no persistence call blocks indefinitely."""
    if database_url.startswith("postgresql+asyncpg"):
        return {"timeout": timeout, "command_timeout": timeout}
    if database_url.startswith("sqlite"):
        return {"timeout": timeout}
    return {}


def get_engine() -> AsyncEngine:
    """Return the singleton async engine, creating it on first call."""
    global _engine
    if _engine is None:
        settings = get_settings()
        kwargs: dict[str, Any] = {
            "echo": settings.debug,
            "pool_pre_ping": True,
            "connect_args": _connect_args(settings.database_url, settings.db_timeout_seconds),
        }
        if not settings.database_url.startswith("sqlite"):
            kwargs["pool_timeout"] = settings.db_timeout_seconds
        _engine = create_async_engine(settings.database_url, **kwargs)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the singleton async session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async database session."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def init_db() -> None:
    """Create tables and seed reference leave policies if the table is empty."""
    from leavedesk.models import SQLModel
    from leavedesk.services.policy import seed_default_policies

    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    async with get_session_factory()() as session:
        await seed_default_policies(session)


async def dispose_engine() -> None:
    """Dispose the engine and reset singletons. Call on app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
