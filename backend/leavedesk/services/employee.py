from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.config import get_settings
from leavedesk.exceptions import BusinessRuleError, ConflictError, NotFoundError, Violation
from leavedesk.models.employee import Employee
from leavedesk.models.enums import AuditAction, AuditEntityType, Department, RequestStatus
from leavedesk.models.request import LeaveRequest
from leavedesk.schemas.employee import (
    DepartmentStats,
    DepartmentStatsResponse,
    DepartmentStatsSummary,
    EmployeeResponse,
)
from leavedesk.services.audit import model_to_audit_dict, write_audit_log
from leavedesk.services.balance import claim_employee, lock_employee
from leavedesk.services.entitlement import initial_annual_entitlement, initial_sick_entitlement
from leavedesk.services.validation import LeaveRules, validate_joining_date

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.employee import CreateEmployeeRequest

logger = logging.getLogger(__name__)

_DUPLICATE_EMAIL = Violation("duplicate_email", "An employee with this email address already exists")


def build_employee_response(employee: Employee) -> EmployeeResponse:
    """Map an employee model to its response schema."""
    return EmployeeResponse(
        id=employee.id,  # type: ignore[arg-type]
        name=employee.name,
        email=employee.email,
        department=Department(employee.department),
        joining_date=employee.joining_date,
        annual_leave_balance=employee.annual_leave_balance,
        sick_leave_balance=employee.sick_leave_balance,
        is_active=employee.is_active,
        created_at=employee.created_at,
    )


async def get_employee_or_404(session: AsyncSession, employee_id: int) -> Employee:
    """Fetch an active employee. Raises 404 if missing or deactivated."""
    result = await session.execute(
        select(Employee).where(col(Employee.id) == employee_id, col(Employee.is_active).is_(True))
    )
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def _email_taken(session: AsyncSession, email: str) -> bool:
    result = await session.execute(select(col(Employee.id)).where(func.lower(col(Employee.email)) == email))
    return result.first() is not None


async def create_employee(
    session: AsyncSession,
    payload: CreateEmployeeRequest,
    today: date,
    auth: AuthContext | None = None,
) -> EmployeeResponse:
    """Register an employee with pro-rated annual and flat sick entitlements."""
    settings = get_settings()
    email = str(payload.email).strip().lower()

    if await _email_taken(session, email):
        raise ConflictError(_DUPLICATE_EMAIL)

    violations = validate_joining_date(payload.joining_date, today, LeaveRules.from_settings(settings))
    if violations:
        raise BusinessRuleError(violations)

    employee = Employee(
        name=payload.name,
        email=email,
        department=payload.department.value,
        joining_date=payload.joining_date,
        annual_leave_balance=initial_annual_entitlement(
            payload.joining_date, today, settings.annual_leave_entitlement
        ),
        sick_leave_balance=initial_sick_entitlement(settings.sick_leave_entitlement),
    )
    session.add(employee)

    try:
        await session.flush()
        await write_audit_log(
            session,
            actor_id=auth.user_id if auth else None,
            entity_type=AuditEntityType.EMPLOYEE,
            entity_id=employee.id,  # type: ignore[arg-type]
            action=AuditAction.CREATE,
            after_json=model_to_audit_dict(employee),
        )
        await session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email.
        await session.rollback()
        raise ConflictError(_DUPLICATE_EMAIL) from None

    await session.refresh(employee)
    logger.info(
        "Registered employee=%s department=%s annual=%d sick=%d",
        employee.id,
        employee.department,
        employee.annual_leave_balance,
        employee.sick_leave_balance,
    )
    return build_employee_response(employee)


async def get_employee(session: AsyncSession, employee_id: int) -> EmployeeResponse:
    employee = await get_employee_or_404(session, employee_id)
    return build_employee_response(employee)


async def list_employees(session: AsyncSession, department: Department | None = None) -> list[EmployeeResponse]:
    """List active employees ordered by name."""
    query = select(Employee).where(col(Employee.is_active).is_(True))
    if department is not None:
        query = query.where(col(Employee.department) == department.value)
    result = await session.execute(query.order_by(col(Employee.name)))
    return [build_employee_response(e) for e in result.scalars().all()]


async def deactivate_employee(session: AsyncSession, auth: AuthContext, employee_id: int) -> EmployeeResponse:
    """Soft-delete an employee; leave history stays intact.

    Refused while the employee still has pending requests.
    """
    employee = await lock_employee(session, employee_id)

    pending = await session.execute(
        select(func.count())
        .select_from(LeaveRequest)
        .where(
            col(LeaveRequest.employee_id) == employee_id,
            col(LeaveRequest.status) == RequestStatus.PENDING.value,
        )
    )
    if pending.scalar_one() > 0:
        raise BusinessRuleError(
            "Employee has pending leave requests; decide or cancel them first", code="pending_requests"
        )

    before_dict = model_to_audit_dict(employee)
    await claim_employee(session, employee, is_active=False)

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee_id,
        action=AuditAction.DEACTIVATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(employee),
    )
    await session.commit()
    await session.refresh(employee)
    logger.info("Deactivated employee=%s", employee_id)
    return build_employee_response(employee)


async def get_department_stats(session: AsyncSession) -> DepartmentStatsResponse:
    """Headcount and average balances per department for active employees."""
    result = await session.execute(
        select(
            col(Employee.department),
            func.count().label("total_employees"),
            func.avg(col(Employee.annual_leave_balance)).label("avg_annual"),
            func.avg(col(Employee.sick_leave_balance)).label("avg_sick"),
        )
        .where(col(Employee.is_active).is_(True))
        .group_by(col(Employee.department))
        .order_by(col(Employee.department))
    )
    rows = [
        DepartmentStats(
            department=row.department,
            total_employees=int(row.total_employees),
            avg_annual_balance=round(float(row.avg_annual or 0), 1),
            avg_sick_balance=round(float(row.avg_sick or 0), 1),
        )
        for row in result.all()
    ]

    departments = len(rows)
    summary = DepartmentStatsSummary(
        total_employees=sum(r.total_employees for r in rows),
        total_departments=departments,
        company_avg_annual_balance=round(sum(r.avg_annual_balance for r in rows) / departments, 1)
        if departments
        else 0.0,
        company_avg_sick_balance=round(sum(r.avg_sick_balance for r in rows) / departments, 1)
        if departments
        else 0.0,
    )
    return DepartmentStatsResponse(department_breakdown=rows, summary=summary)
