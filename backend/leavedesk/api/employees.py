# ruff: noqa: B008, TC001
from __future__ import annotations

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import ApproverDep, AuthDep, TodayDep
from leavedesk.db import SessionDep
from leavedesk.models.enums import BalanceType, Department
from leavedesk.schemas.balance import (
    BalanceAdjustmentPayload,
    BalanceAdjustmentResponse,
    LeaveBalanceResponse,
    LedgerListResponse,
)
from leavedesk.schemas.common import Envelope
from leavedesk.schemas.employee import CreateEmployeeRequest, DepartmentStatsResponse, EmployeeResponse
from leavedesk.services import balance as balance_service
from leavedesk.services import employee as employee_service

employees_router = APIRouter(prefix="/employees", tags=["employees"])


@employees_router.post("", response_model=Envelope[EmployeeResponse], status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: CreateEmployeeRequest,
    session: SessionDep,
    auth: AuthDep,
    today: TodayDep,
) -> Envelope[EmployeeResponse]:
    """Register a new employee with pro-rated leave entitlements."""
    employee = await employee_service.create_employee(session, payload, today, auth)
    return Envelope(message="Employee created successfully", data=employee)


@employees_router.get("", response_model=Envelope[list[EmployeeResponse]])
async def list_employees(
    session: SessionDep,
    department: Department | None = Query(default=None),
) -> Envelope[list[EmployeeResponse]]:
    """List active employees, optionally filtered by department."""
    employees = await employee_service.list_employees(session, department)
    return Envelope(message="Employees retrieved successfully", data=employees)


@employees_router.get("/stats/department", response_model=Envelope[DepartmentStatsResponse])
async def department_stats(session: SessionDep) -> Envelope[DepartmentStatsResponse]:
    """Headcount and average balances per department."""
    stats = await employee_service.get_department_stats(session)
    return Envelope(message="Department statistics retrieved successfully", data=stats)


@employees_router.get("/{employee_id}", response_model=Envelope[EmployeeResponse])
async def get_employee(employee_id: int, session: SessionDep) -> Envelope[EmployeeResponse]:
    employee = await employee_service.get_employee(session, employee_id)
    return Envelope(message="Employee retrieved successfully", data=employee)


@employees_router.get("/{employee_id}/leave-balance", response_model=Envelope[LeaveBalanceResponse])
async def get_leave_balance(employee_id: int, session: SessionDep) -> Envelope[LeaveBalanceResponse]:
    """Entitlement, remaining, used and utilization per leave type."""
    balance = await balance_service.get_leave_balance(session, employee_id)
    return Envelope(message="Leave balance retrieved successfully", data=balance)


@employees_router.put("/{employee_id}/leave-balance", response_model=Envelope[BalanceAdjustmentResponse])
async def update_leave_balance(
    employee_id: int,
    payload: BalanceAdjustmentPayload,
    session: SessionDep,
    auth: ApproverDep,
) -> Envelope[BalanceAdjustmentResponse]:
    """Manually add to or subtract from a balance (HR only)."""
    adjustment = await balance_service.update_leave_balance(session, auth, employee_id, payload)
    return Envelope(message="Leave balance updated successfully", data=adjustment)


@employees_router.get("/{employee_id}/ledger", response_model=Envelope[LedgerListResponse])
async def get_ledger(
    employee_id: int,
    session: SessionDep,
    leave_type: BalanceType | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> Envelope[LedgerListResponse]:
    """Balance ledger entries for an employee, newest first."""
    ledger = await balance_service.get_employee_ledger(session, employee_id, leave_type, offset, limit)
    return Envelope(message="Ledger retrieved successfully", data=ledger)


@employees_router.delete("/{employee_id}", response_model=Envelope[EmployeeResponse])
async def deactivate_employee(
    employee_id: int,
    session: SessionDep,
    auth: ApproverDep,
) -> Envelope[EmployeeResponse]:
    """Soft-delete an employee (HR only)."""
    employee = await employee_service.deactivate_employee(session, auth, employee_id)
    return Envelope(message="Employee deactivated successfully", data=employee)
