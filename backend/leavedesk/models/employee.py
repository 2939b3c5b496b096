from __future__ import annotations

from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import IntIdBase, TimestampMixin


class Employee(IntIdBase, TimestampMixin, table=True):
    """A registered employee with per-type leave balances.

    Balances only change through the balance ledger. ``version`` is bumped by
    every guarded write so concurrent check-then-act sequences detect each other.
    """

    __tablename__ = "employee"
    __table_args__ = (
        sa.CheckConstraint("annual_leave_balance >= 0", name="ck_employee_annual_non_negative"),
        sa.CheckConstraint("sick_leave_balance >= 0", name="ck_employee_sick_non_negative"),
    )

    name: str = Field(max_length=100)
    email: str = Field(max_length=255, unique=True, index=True)
    department: str = Field(max_length=50, index=True)
    joining_date: date
    annual_leave_balance: int = Field(default=24)
    sick_leave_balance: int = Field(default=12, sa_column_kwargs={"server_default": "12"})
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
