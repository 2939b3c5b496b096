from __future__ import annotations

from pydantic import BaseModel

from leavedesk.models.enums import Department, LeaveType


class LeavePolicyResponse(BaseModel):
    """Reference entitlement data for one department and leave type."""

    id: int
    department: Department
    leave_type: LeaveType
    annual_entitlement: int
    max_consecutive_days: int
    min_notice_days: int
    carry_forward_allowed: bool
    is_active: bool
