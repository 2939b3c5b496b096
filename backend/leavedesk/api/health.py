import logging
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from leavedesk.config import get_settings
from leavedesk.db import SessionDep
from leavedesk.schemas.common import Envelope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthStatus(BaseModel):
    status: Literal["ok", "degraded"]
    database: Literal["up", "down"]
    service: str
    version: str
    environment: str
    timestamp: datetime


@router.get("/health", response_model=Envelope[HealthStatus])
async def health(session: SessionDep) -> Envelope[HealthStatus]:
    """Report service health; the database is checked with ``SELECT 1``."""
    settings = get_settings()
    database: Literal["up", "down"] = "up"

    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError, TimeoutError):
        logger.exception("Health check: database connectivity failed")
        database = "down"

    return Envelope(
        message=f"{settings.app_name} is running" if database == "up" else f"{settings.app_name} is degraded",
        data=HealthStatus(
            status="ok" if database == "up" else "degraded",
            database=database,
            service=settings.app_name,
            version=settings.app_version,
            environment=settings.environment,
            timestamp=datetime.now(UTC),
        ),
    )
