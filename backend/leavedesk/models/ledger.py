from __future__ import annotations

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import IntIdBase


def _now_utc() -> datetime:
    return datetime.now(UTC)


class LeaveBalanceEntry(IntIdBase, table=True):
    """Append-only record of every balance adjustment.

    ``days`` is signed: negative for debits, positive for credits.
    ``balance_after`` is the stored balance once the adjustment applied.
    """

    __tablename__ = "leave_balance_entry"
    __table_args__ = (sa.Index("ix_balance_entry_employee_type", "employee_id", "leave_type"),)

    employee_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("employee.id"), nullable=False, index=True),
    )
    leave_type: str = Field(max_length=20)
    days: int
    balance_after: int
    source_type: str = Field(max_length=50)
    source_id: int | None = None
    reason: str | None = None
    created_by: int | None = None
    created_at: datetime = Field(
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
