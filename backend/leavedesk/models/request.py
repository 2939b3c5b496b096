from __future__ import annotations

from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import IntIdBase, TimestampMixin
from leavedesk.models.enums import RequestStatus


class LeaveRequest(IntIdBase, TimestampMixin, table=True):
    """An employee's leave request with approval workflow state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_employee_status", "employee_id", "status"),
        sa.Index("ix_leave_request_dates", "start_date", "end_date"),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_request_date_order"),
    )

    employee_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("employee.id"), nullable=False, index=True),
    )
    leave_type: str = Field(max_length=20)
    start_date: date
    end_date: date
    days_requested: int
    reason: str
    status: str = Field(
        default=RequestStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    approved_by: int | None = Field(
        default=None,
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("employee.id"), nullable=True),
    )
    approved_at: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
    )
    comments: str | None = None
