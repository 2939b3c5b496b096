from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import IntIdBase


def _now_utc() -> datetime:
    return datetime.now(UTC)


class AuditLog(IntIdBase, table=True):
    """Append-only trail of employee, request and balance mutations.

    ``employee_id`` is the employee whose leave is affected, which for
    request and adjustment rows differs from ``entity_id``. Request
    transitions record ``from_status``/``to_status``; anything that moves a
    balance records the signed ``days_delta``.
    """

    __tablename__ = "audit_log"
    __table_args__ = (
        sa.Index("ix_audit_entity", "entity_type", "entity_id"),
        sa.Index("ix_audit_employee_created", "employee_id", "created_at"),
    )

    actor_id: int | None = None
    entity_type: str = Field(max_length=50)
    entity_id: int
    action: str = Field(max_length=50)
    employee_id: int | None = None
    from_status: str | None = Field(default=None, max_length=20)
    to_status: str | None = Field(default=None, max_length=20)
    days_delta: int | None = None
    before_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    after_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    created_at: datetime = Field(
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
