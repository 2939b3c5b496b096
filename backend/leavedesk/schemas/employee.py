from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from leavedesk.models.enums import Department


class CreateEmployeeRequest(BaseModel):
    """Request body for registering an employee."""

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    department: Department
    joining_date: date

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "Name is required"
            raise ValueError(msg)
        return value


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    id: int
    name: str
    email: str
    department: Department
    joining_date: date
    annual_leave_balance: int
    sick_leave_balance: int
    is_active: bool
    created_at: datetime


class DepartmentStats(BaseModel):
    """Headcount and average balances for one department."""

    department: str
    total_employees: int
    avg_annual_balance: float
    avg_sick_balance: float


class DepartmentStatsSummary(BaseModel):
    total_employees: int
    total_departments: int
    company_avg_annual_balance: float
    company_avg_sick_balance: float


class DepartmentStatsResponse(BaseModel):
    department_breakdown: list[DepartmentStats]
    summary: DepartmentStatsSummary
