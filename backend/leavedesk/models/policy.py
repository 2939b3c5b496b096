from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import IntIdBase, TimestampMixin


class LeavePolicy(IntIdBase, TimestampMixin, table=True):
    """Reference entitlement data per department and leave type.

    Read-only at runtime; not consulted by the request validator.
    """

    __tablename__ = "leave_policy"
    __table_args__ = (sa.UniqueConstraint("department", "leave_type", name="uq_leave_policy_department_type"),)

    department: str = Field(max_length=50, index=True)
    leave_type: str = Field(max_length=20)
    annual_entitlement: int
    max_consecutive_days: int
    min_notice_days: int
    carry_forward_allowed: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
