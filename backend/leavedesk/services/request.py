"""Leave request lifecycle: submit, approve, reject and cancel.

Every transition runs in a single transaction: the employee row is locked,
the request status moves with a conditional update, the balance ledger is
adjusted where the leave type carries a balance, and an audit row is written.
Any failure rolls the whole unit back.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select, update
from sqlalchemy.orm import aliased
from sqlmodel import col

from leavedesk.exceptions import BusinessRuleError, NotFoundError, StaleWriteError, UnauthorizedError, Violation
from leavedesk.models.employee import Employee
from leavedesk.models.enums import (
    AuditAction,
    AuditEntityType,
    BalanceOperation,
    LeaveType,
    LedgerSourceType,
    RequestStatus,
)
from leavedesk.models.request import LeaveRequest
from leavedesk.schemas.request import LeaveRequestResponse
from leavedesk.services.audit import model_to_audit_dict, write_audit_log
from leavedesk.services.balance import (
    adjust_balance,
    balance_for,
    balance_type_for,
    claim_employee,
    lock_employee,
)
from leavedesk.services.overlap import find_overlapping_requests
from leavedesk.services.validation import (
    DEFAULT_RULES,
    LeaveRules,
    insufficient_balance,
    validate_leave_request,
    validate_rejection_comments,
)

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.request import ApprovePayload, CancelPayload, RejectPayload, SubmitLeavePayload

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED}),
    RequestStatus.APPROVED: frozenset({RequestStatus.CANCELLED}),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(
    request: LeaveRequest,
    employee_name: str | None = None,
    employee_department: str | None = None,
    approved_by_name: str | None = None,
) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,  # type: ignore[arg-type]
        employee_id=request.employee_id,
        employee_name=employee_name,
        employee_department=employee_department,
        leave_type=LeaveType(request.leave_type),
        start_date=request.start_date,
        end_date=request.end_date,
        days_requested=request.days_requested,
        reason=request.reason,
        status=RequestStatus(request.status),
        approved_by=request.approved_by,
        approved_by_name=approved_by_name,
        approved_at=request.approved_at,
        comments=request.comments,
        created_at=request.created_at,
    )


def _detailed_query() -> Any:
    """Requests joined with the owning employee and the (optional) approver."""
    approver = aliased(Employee, name="approver")
    return (
        select(
            LeaveRequest,
            col(Employee.name).label("employee_name"),
            col(Employee.department).label("employee_department"),
            approver.name.label("approved_by_name"),  # type: ignore[attr-defined]
        )
        .join(Employee, col(LeaveRequest.employee_id) == col(Employee.id))
        .outerjoin(approver, col(LeaveRequest.approved_by) == approver.id)  # type: ignore[arg-type]
    )


def _row_to_response(row: Any) -> LeaveRequestResponse:
    return _build_request_response(
        row[0],
        employee_name=row.employee_name,
        employee_department=row.employee_department,
        approved_by_name=row.approved_by_name,
    )


async def _get_request_or_404(session: AsyncSession, request_id: int) -> LeaveRequest:
    """Fetch a request by ID, bypassing any stale cached copy. Raises 404 if not found."""
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.id) == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Leave request not found")
    return request


async def _get_approver_or_404(session: AsyncSession, approver_id: int) -> Employee:
    result = await session.execute(
        select(Employee).where(col(Employee.id) == approver_id, col(Employee.is_active).is_(True))
    )
    approver = result.scalar_one_or_none()
    if approver is None:
        raise NotFoundError("Approver not found")
    return approver


def _ensure_transition(request: LeaveRequest, target: RequestStatus) -> None:
    current = RequestStatus(request.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise BusinessRuleError(
            Violation(
                "invalid_transition",
                f"Cannot move a {current.value} leave request to {target.value}",
            )
        )


async def _transition(
    session: AsyncSession,
    request: LeaveRequest,
    target: RequestStatus,
    **values: Any,
) -> None:
    """Move ``request`` to ``target`` only if its status is still what was read."""
    _ensure_transition(request, target)
    result = await session.execute(
        update(LeaveRequest)
        .where(
            col(LeaveRequest.id) == request.id,
            col(LeaveRequest.status) == request.status,
        )
        .values(status=target.value, **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        logger.warning("Stale transition on request=%s from %s to %s", request.id, request.status, target.value)
        raise StaleWriteError()
    await session.refresh(request)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitLeavePayload,
    today: date,
    rules: LeaveRules = DEFAULT_RULES,
) -> LeaveRequestResponse:
    """Submit a leave request in ``pending`` state.

    Flow:
    1. Lock the (active) employee row
    2. Validate dates, notice, duration, reason, joining date and balance
    3. Detect overlapping pending/approved requests
    4. Report every violation at once
    5. Insert the request with the precomputed working days
    6. Bump the employee version so racing submissions conflict
    7. Audit log and commit
    """
    employee = await lock_employee(session, payload.employee_id)

    check = validate_leave_request(
        payload.leave_type,
        payload.start_date,
        payload.end_date,
        payload.reason,
        today=today,
        rules=rules,
        joining_date=employee.joining_date,
        available_balance=balance_for(employee, payload.leave_type),
    )
    violations = list(check.violations)

    if payload.start_date <= payload.end_date:
        overlapping = await find_overlapping_requests(
            session, employee.id, payload.start_date, payload.end_date  # type: ignore[arg-type]
        )
        violations.extend(
            Violation(
                "overlapping_request",
                f"Leave request overlaps with existing {o.status} request #{o.id} "
                f"({o.start_date.isoformat()} to {o.end_date.isoformat()})",
            )
            for o in overlapping
        )

    if violations:
        raise BusinessRuleError(violations)

    leave_request = LeaveRequest(
        employee_id=payload.employee_id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        days_requested=check.working_days,
        reason=payload.reason.strip(),
        status=RequestStatus.PENDING.value,
    )
    session.add(leave_request)

    try:
        await session.flush()
        await claim_employee(session, employee)
        await write_audit_log(
            session,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.REQUEST,
            entity_id=leave_request.id,  # type: ignore[arg-type]
            action=AuditAction.SUBMIT,
            after_json=model_to_audit_dict(leave_request),
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Submitted request=%s employee=%s type=%s %s..%s days=%d",
        leave_request.id,
        leave_request.employee_id,
        leave_request.leave_type,
        leave_request.start_date,
        leave_request.end_date,
        leave_request.days_requested,
    )
    return await get_request(session, leave_request.id)  # type: ignore[arg-type]


async def approve_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: ApprovePayload,
) -> LeaveRequestResponse:
    """Approve a pending request and debit the employee's balance.

    1. Fetch the request (must be pending) and the approver.
    2. Lock the employee and re-check the balance against days_requested.
    3. Conditionally move the status to approved.
    4. Debit the balance through the ledger (tracked leave types only).
    5. Audit log with before/after and commit.
    """
    leave_request = await _get_request_or_404(session, request_id)
    _ensure_transition(leave_request, RequestStatus.APPROVED)
    await _get_approver_or_404(session, payload.approved_by)

    employee = await lock_employee(session, leave_request.employee_id, active_only=False)
    balance_type = balance_type_for(leave_request.leave_type)
    available = balance_for(employee, leave_request.leave_type)
    if available is not None and available < leave_request.days_requested:
        raise BusinessRuleError(
            insufficient_balance(leave_request.leave_type, available, leave_request.days_requested)
        )

    before_dict = model_to_audit_dict(leave_request)
    try:
        await _transition(
            session,
            leave_request,
            RequestStatus.APPROVED,
            approved_by=payload.approved_by,
            approved_at=datetime.now(UTC),
            comments=payload.comments,
        )
        if balance_type is not None:
            await adjust_balance(
                session,
                leave_request.employee_id,
                balance_type,
                leave_request.days_requested,
                BalanceOperation.SUBTRACT,
                source_type=LedgerSourceType.APPROVAL,
                source_id=leave_request.id,
                actor_id=payload.approved_by,
            )
        else:
            await claim_employee(session, employee)
        await write_audit_log(
            session,
            actor_id=payload.approved_by,
            entity_type=AuditEntityType.REQUEST,
            entity_id=request_id,
            action=AuditAction.APPROVE,
            before_json=before_dict,
            after_json=model_to_audit_dict(leave_request),
            days_delta=-leave_request.days_requested if balance_type is not None else None,
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Approved request=%s by=%s days=%d", request_id, payload.approved_by, leave_request.days_requested)
    return await get_request(session, request_id)


async def reject_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: RejectPayload,
    rules: LeaveRules = DEFAULT_RULES,
) -> LeaveRequestResponse:
    """Reject a pending request. Comments are mandatory; balances are untouched."""
    leave_request = await _get_request_or_404(session, request_id)

    violations = validate_rejection_comments(payload.comments, rules)
    if violations:
        raise BusinessRuleError(violations)

    _ensure_transition(leave_request, RequestStatus.REJECTED)
    await _get_approver_or_404(session, payload.approved_by)

    before_dict = model_to_audit_dict(leave_request)
    try:
        await _transition(
            session,
            leave_request,
            RequestStatus.REJECTED,
            approved_by=payload.approved_by,
            approved_at=datetime.now(UTC),
            comments=payload.comments.strip(),
        )
        await write_audit_log(
            session,
            actor_id=payload.approved_by,
            entity_type=AuditEntityType.REQUEST,
            entity_id=request_id,
            action=AuditAction.REJECT,
            before_json=before_dict,
            after_json=model_to_audit_dict(leave_request),
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Rejected request=%s by=%s", request_id, payload.approved_by)
    return await get_request(session, request_id)


async def cancel_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: CancelPayload,
    today: date,
) -> LeaveRequestResponse:
    """Cancel a pending or approved request before it starts.

    Cancelling an approved request credits the days back to the balance in
    the same transaction.
    """
    leave_request = await _get_request_or_404(session, request_id)

    if leave_request.employee_id != payload.employee_id:
        raise UnauthorizedError("You can only cancel your own leave requests")

    _ensure_transition(leave_request, RequestStatus.CANCELLED)

    if today >= leave_request.start_date:
        raise BusinessRuleError(
            Violation("leave_already_started", "Leave that has already started cannot be cancelled")
        )

    employee = await lock_employee(session, leave_request.employee_id, active_only=False)
    was_approved = leave_request.status == RequestStatus.APPROVED.value
    balance_type = balance_type_for(leave_request.leave_type)

    values: dict[str, Any] = {}
    if payload.reason and payload.reason.strip():
        values["comments"] = payload.reason.strip()

    before_dict = model_to_audit_dict(leave_request)
    try:
        await _transition(session, leave_request, RequestStatus.CANCELLED, **values)
        if was_approved and balance_type is not None:
            await adjust_balance(
                session,
                leave_request.employee_id,
                balance_type,
                leave_request.days_requested,
                BalanceOperation.ADD,
                source_type=LedgerSourceType.CANCELLATION,
                source_id=leave_request.id,
                reason=values.get("comments"),
                actor_id=payload.employee_id,
            )
        else:
            await claim_employee(session, employee)
        await write_audit_log(
            session,
            actor_id=payload.employee_id,
            entity_type=AuditEntityType.REQUEST,
            entity_id=request_id,
            action=AuditAction.CANCEL,
            before_json=before_dict,
            after_json=model_to_audit_dict(leave_request),
            days_delta=leave_request.days_requested if was_approved and balance_type is not None else None,
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Cancelled request=%s (was %s)", request_id, "approved" if was_approved else "pending")
    return await get_request(session, request_id)


async def get_request(session: AsyncSession, request_id: int) -> LeaveRequestResponse:
    """Get a single request with employee and approver names."""
    result = await session.execute(_detailed_query().where(col(LeaveRequest.id) == request_id))
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Leave request not found")
    return _row_to_response(row)


async def list_requests(
    session: AsyncSession,
    *,
    status_filter: RequestStatus | None = None,
    department: str | None = None,
    leave_type: LeaveType | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    employee_id: int | None = None,
) -> list[LeaveRequestResponse]:
    """List requests with optional filters, newest first.

    ``start_date``/``end_date`` keep requests lying entirely within the window.
    """
    query = _detailed_query()

    if status_filter is not None:
        query = query.where(col(LeaveRequest.status) == status_filter.value)
    if department is not None:
        query = query.where(col(Employee.department) == department)
    if leave_type is not None:
        query = query.where(col(LeaveRequest.leave_type) == leave_type.value)
    if start_date is not None:
        query = query.where(col(LeaveRequest.start_date) >= start_date)
    if end_date is not None:
        query = query.where(col(LeaveRequest.end_date) <= end_date)
    if employee_id is not None:
        query = query.where(col(LeaveRequest.employee_id) == employee_id)

    result = await session.execute(
        query.order_by(col(LeaveRequest.created_at).desc(), col(LeaveRequest.id).desc())
    )
    return [_row_to_response(row) for row in result.all()]


async def list_employee_requests(
    session: AsyncSession,
    employee_id: int,
    status_filter: RequestStatus | None = None,
) -> list[LeaveRequestResponse]:
    """All requests of one employee. Raises 404 for unknown employees."""
    exists = await session.execute(select(func.count()).select_from(Employee).where(col(Employee.id) == employee_id))
    if exists.scalar_one() == 0:
        raise NotFoundError("Employee not found")
    return await list_requests(session, status_filter=status_filter, employee_id=employee_id)
