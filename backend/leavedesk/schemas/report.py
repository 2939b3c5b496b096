from __future__ import annotations

from pydantic import BaseModel

from leavedesk.schemas.request import LeaveRequestResponse


class LeaveStatsRow(BaseModel):
    """Aggregated requests for one (department, leave type, status) bucket."""

    department: str
    leave_type: str
    status: str
    request_count: int
    total_days: int
    avg_days_per_request: float


class LeaveStatsOverview(BaseModel):
    """Yearly breakdown, pending queue size and the upcoming approved leaves."""

    year: int
    breakdown: list[LeaveStatsRow]
    pending_count: int
    upcoming_window_days: int
    upcoming_leaves: list[LeaveRequestResponse]
