"""Balance ledger: guarded mutations of employee leave balances."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select, update
from sqlmodel import col

from leavedesk.config import get_settings
from leavedesk.exceptions import BusinessRuleError, NotFoundError, StaleWriteError
from leavedesk.models.employee import Employee
from leavedesk.models.enums import (
    AuditAction,
    AuditEntityType,
    BalanceOperation,
    BalanceType,
    LeaveType,
    LedgerSourceType,
)
from leavedesk.models.ledger import LeaveBalanceEntry
from leavedesk.schemas.balance import (
    BalanceAdjustmentResponse,
    BalanceDetail,
    LeaveBalanceResponse,
    LedgerEntryResponse,
    LedgerListResponse,
)
from leavedesk.services.audit import model_to_audit_dict, write_audit_log
from leavedesk.services.validation import insufficient_balance

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.balance import BalanceAdjustmentPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _balance_attr(balance_type: BalanceType) -> str:
    match balance_type:
        case BalanceType.ANNUAL:
            return "annual_leave_balance"
        case BalanceType.SICK:
            return "sick_leave_balance"


def _signed_days(days: int, operation: BalanceOperation) -> int:
    match operation:
        case BalanceOperation.ADD:
            return days
        case BalanceOperation.SUBTRACT:
            return -days


def balance_type_for(leave_type: LeaveType | str) -> BalanceType | None:
    """Map a leave type onto the balance it draws from. Emergency leave has none."""
    match LeaveType(leave_type):
        case LeaveType.ANNUAL:
            return BalanceType.ANNUAL
        case LeaveType.SICK:
            return BalanceType.SICK
        case LeaveType.EMERGENCY:
            return None


def balance_for(employee: Employee, leave_type: LeaveType | str) -> int | None:
    """Current balance the leave type draws from, or None when it is untracked."""
    balance_type = balance_type_for(leave_type)
    if balance_type is None:
        return None
    return int(getattr(employee, _balance_attr(balance_type)))


async def _guarded_update(session: AsyncSession, employee: Employee, values: dict[str, Any]) -> None:
    """Apply ``values`` only if nobody changed the row since it was read.

    Bumps ``version``; raises StaleWriteError when zero rows match.
    """
    result = await session.execute(
        update(Employee)
        .where(
            col(Employee.id) == employee.id,
            col(Employee.version) == employee.version,
        )
        .values(version=col(Employee.version) + 1, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        logger.warning("Stale write on employee=%s version=%s", employee.id, employee.version)
        raise StaleWriteError()
    await session.refresh(employee)


# ---------------------------------------------------------------------------
# Locking
# ---------------------------------------------------------------------------


async def lock_employee(session: AsyncSession, employee_id: int, *, active_only: bool = True) -> Employee:
    """Load the employee row with a FOR UPDATE lock, refreshing any cached copy."""
    query = select(Employee).where(col(Employee.id) == employee_id)
    if active_only:
        query = query.where(col(Employee.is_active).is_(True))
    result = await session.execute(query.with_for_update().execution_options(populate_existing=True))
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def claim_employee(session: AsyncSession, employee: Employee, **values: Any) -> None:
    """Bump the employee version, optionally setting non-balance columns.

    Serializes writers that depend on the employee's leave history but do not
    move a balance (e.g. submission, whose overlap check must not race).
    """
    await _guarded_update(session, employee, values)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


async def adjust_balance(
    session: AsyncSession,
    employee_id: int,
    balance_type: BalanceType,
    days: int,
    operation: BalanceOperation,
    *,
    source_type: LedgerSourceType,
    source_id: int | None = None,
    reason: str | None = None,
    actor_id: int | None = None,
) -> LeaveBalanceEntry:
    """Add or subtract ``days`` from the stored balance and record a ledger entry.

    Does not clamp at zero: callers check sufficiency first, and the table's
    non-negative constraint rejects anything that slips through. Runs inside
    the caller's transaction; nothing is committed here.
    """
    if days <= 0:
        msg = "days must be a positive integer"
        raise ValueError(msg)

    employee = await lock_employee(session, employee_id, active_only=False)
    attr = _balance_attr(balance_type)
    signed = _signed_days(days, operation)

    await _guarded_update(session, employee, {attr: getattr(Employee, attr) + signed})

    entry = LeaveBalanceEntry(
        employee_id=employee_id,
        leave_type=balance_type.value,
        days=signed,
        balance_after=getattr(employee, attr),
        source_type=source_type.value,
        source_id=source_id,
        reason=reason,
        created_by=actor_id,
    )
    session.add(entry)
    await session.flush()

    logger.info(
        "Balance %s %d %s day(s) for employee=%s (now %d) source=%s:%s",
        operation.value,
        days,
        balance_type.value,
        employee_id,
        entry.balance_after,
        source_type.value,
        source_id,
    )
    return entry


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


def _detail(entitlement: int, remaining: int) -> BalanceDetail:
    used = entitlement - remaining
    utilization = round(used / entitlement * 100, 1) if entitlement else 0.0
    return BalanceDetail(
        total_entitlement=entitlement,
        remaining_balance=remaining,
        used=used,
        utilization_percentage=utilization,
    )


def build_leave_balance_response(employee: Employee) -> LeaveBalanceResponse:
    """Per-type entitlement, remaining, used and utilization for an employee."""
    settings = get_settings()
    return LeaveBalanceResponse(
        employee_id=employee.id,  # type: ignore[arg-type]
        employee_name=employee.name,
        department=employee.department,
        joining_date=employee.joining_date,
        leave_balances={
            BalanceType.ANNUAL.value: _detail(settings.annual_leave_entitlement, employee.annual_leave_balance),
            BalanceType.SICK.value: _detail(settings.sick_leave_entitlement, employee.sick_leave_balance),
        },
    )


async def get_leave_balance(session: AsyncSession, employee_id: int) -> LeaveBalanceResponse:
    result = await session.execute(
        select(Employee).where(col(Employee.id) == employee_id, col(Employee.is_active).is_(True))
    )
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee not found")
    return build_leave_balance_response(employee)


def _build_ledger_entry_response(entry: LeaveBalanceEntry) -> LedgerEntryResponse:
    return LedgerEntryResponse(
        id=entry.id,  # type: ignore[arg-type]
        employee_id=entry.employee_id,
        leave_type=BalanceType(entry.leave_type),
        days=entry.days,
        balance_after=entry.balance_after,
        source_type=LedgerSourceType(entry.source_type),
        source_id=entry.source_id,
        reason=entry.reason,
        created_by=entry.created_by,
        created_at=entry.created_at,
    )


async def get_employee_ledger(
    session: AsyncSession,
    employee_id: int,
    leave_type: BalanceType | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LedgerListResponse:
    """Paginated ledger entries for an employee, newest first."""
    exists = await session.execute(select(col(Employee.id)).where(col(Employee.id) == employee_id))
    if exists.scalar_one_or_none() is None:
        raise NotFoundError("Employee not found")

    filters = [col(LeaveBalanceEntry.employee_id) == employee_id]
    if leave_type is not None:
        filters.append(col(LeaveBalanceEntry.leave_type) == leave_type.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveBalanceEntry).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveBalanceEntry)
        .where(*filters)
        .order_by(col(LeaveBalanceEntry.created_at).desc(), col(LeaveBalanceEntry.id).desc())
        .offset(offset)
        .limit(limit)
    )
    entries = list(result.scalars().all())

    return LedgerListResponse(items=[_build_ledger_entry_response(e) for e in entries], total=total)


# ---------------------------------------------------------------------------
# Write path - manual adjustments
# ---------------------------------------------------------------------------


async def update_leave_balance(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: int,
    payload: BalanceAdjustmentPayload,
) -> BalanceAdjustmentResponse:
    """Manually add to or subtract from an employee's balance.

    Subtractions that would leave a negative balance are rejected.
    """
    min_reason = get_settings().min_reason_length
    if len(payload.reason.strip()) < min_reason:
        raise BusinessRuleError(
            f"Reason is required and must be at least {min_reason} characters", code="reason_too_short"
        )

    employee = await lock_employee(session, employee_id)

    current = int(getattr(employee, _balance_attr(payload.leave_type)))
    if payload.operation == BalanceOperation.SUBTRACT and current < payload.days:
        raise BusinessRuleError(insufficient_balance(payload.leave_type.value, current, payload.days))

    before_dict = model_to_audit_dict(employee)
    try:
        entry = await adjust_balance(
            session,
            employee_id,
            payload.leave_type,
            payload.days,
            payload.operation,
            source_type=LedgerSourceType.MANUAL,
            reason=payload.reason.strip(),
            actor_id=auth.user_id,
        )
        await write_audit_log(
            session,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.ADJUSTMENT,
            entity_id=entry.id,  # type: ignore[arg-type]
            action=AuditAction.ADJUST,
            before_json=before_dict,
            after_json=model_to_audit_dict(employee),
            employee_id=employee_id,
            days_delta=entry.days,
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    return BalanceAdjustmentResponse(
        employee_id=employee_id,
        employee_name=employee.name,
        leave_type=payload.leave_type,
        days=payload.days,
        operation=payload.operation,
        reason=payload.reason.strip(),
        annual_leave_balance=employee.annual_leave_balance,
        sick_leave_balance=employee.sick_leave_balance,
    )
