from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from leavedesk.models.enums import LeaveType, RequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitLeavePayload(BaseModel):
    """Request body for submitting a new leave request.

    Date ordering, notice and duration are business rules checked by the
    service so every violation can be reported together.
    """

    employee_id: int = Field(gt=0)
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(max_length=2000)


class ApprovePayload(BaseModel):
    """Request body for approving a leave request."""

    approved_by: int = Field(gt=0)
    comments: str | None = Field(default=None, max_length=500)


class RejectPayload(BaseModel):
    """Request body for rejecting a leave request. Comments are mandatory."""

    approved_by: int = Field(gt=0)
    comments: str = Field(min_length=1, max_length=500)


class CancelPayload(BaseModel):
    """Request body for cancelling a leave request."""

    employee_id: int = Field(gt=0)
    reason: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: int
    employee_id: int
    employee_name: str | None = None
    employee_department: str | None = None
    leave_type: LeaveType
    start_date: date
    end_date: date
    days_requested: int
    reason: str
    status: RequestStatus
    approved_by: int | None
    approved_by_name: str | None = None
    approved_at: datetime | None
    comments: str | None
    created_at: datetime
