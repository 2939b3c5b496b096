# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import ApproverDep, AuthDep, RulesDep, TodayDep
from leavedesk.config import get_settings
from leavedesk.db import SessionDep
from leavedesk.models.enums import Department, LeaveType, RequestStatus
from leavedesk.schemas.common import Envelope
from leavedesk.schemas.report import LeaveStatsOverview
from leavedesk.schemas.request import (
    ApprovePayload,
    CancelPayload,
    LeaveRequestResponse,
    RejectPayload,
    SubmitLeavePayload,
)
from leavedesk.services import report as report_service
from leavedesk.services import request as request_service

requests_router = APIRouter(prefix="/leave-requests", tags=["leave-requests"])


@requests_router.post("", response_model=Envelope[LeaveRequestResponse], status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitLeavePayload,
    session: SessionDep,
    auth: AuthDep,
    today: TodayDep,
    rules: RulesDep,
) -> Envelope[LeaveRequestResponse]:
    """Submit a new leave request."""
    leave_request = await request_service.submit_request(session, auth, payload, today, rules)
    return Envelope(message="Leave request submitted successfully", data=leave_request)


@requests_router.get("", response_model=Envelope[list[LeaveRequestResponse]])
async def list_requests(
    session: SessionDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    department: Department | None = Query(default=None),
    leave_type: LeaveType | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
) -> Envelope[list[LeaveRequestResponse]]:
    """List leave requests with optional filters."""
    requests = await request_service.list_requests(
        session,
        status_filter=status_filter,
        department=department.value if department else None,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
    )
    return Envelope(message="Leave requests retrieved successfully", data=requests)


@requests_router.get("/stats/overview", response_model=Envelope[LeaveStatsOverview])
async def stats_overview(
    session: SessionDep,
    today: TodayDep,
    year: int | None = Query(default=None, ge=2000, le=2100),
) -> Envelope[LeaveStatsOverview]:
    """Yearly breakdown by department, type and status plus upcoming approved leave."""
    overview = await report_service.get_leave_stats_overview(
        session, today, year, window_days=get_settings().upcoming_leave_window_days
    )
    return Envelope(message="Leave statistics retrieved successfully", data=overview)


@requests_router.get("/employee/{employee_id}", response_model=Envelope[list[LeaveRequestResponse]])
async def list_employee_requests(
    employee_id: int,
    session: SessionDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
) -> Envelope[list[LeaveRequestResponse]]:
    requests = await request_service.list_employee_requests(session, employee_id, status_filter)
    return Envelope(message="Employee leave requests retrieved successfully", data=requests)


@requests_router.get("/{request_id}", response_model=Envelope[LeaveRequestResponse])
async def get_request(request_id: int, session: SessionDep) -> Envelope[LeaveRequestResponse]:
    leave_request = await request_service.get_request(session, request_id)
    return Envelope(message="Leave request retrieved successfully", data=leave_request)


@requests_router.put("/{request_id}/approve", response_model=Envelope[LeaveRequestResponse])
async def approve_request(
    request_id: int,
    payload: ApprovePayload,
    session: SessionDep,
    auth: ApproverDep,
) -> Envelope[LeaveRequestResponse]:
    """Approve a pending leave request and debit the balance (HR only)."""
    leave_request = await request_service.approve_request(session, auth, request_id, payload)
    return Envelope(message="Leave request approved successfully", data=leave_request)


@requests_router.put("/{request_id}/reject", response_model=Envelope[LeaveRequestResponse])
async def reject_request(
    request_id: int,
    payload: RejectPayload,
    session: SessionDep,
    auth: ApproverDep,
    rules: RulesDep,
) -> Envelope[LeaveRequestResponse]:
    """Reject a pending leave request with comments (HR only)."""
    leave_request = await request_service.reject_request(session, auth, request_id, payload, rules)
    return Envelope(message="Leave request rejected successfully", data=leave_request)


@requests_router.put("/{request_id}/cancel", response_model=Envelope[LeaveRequestResponse])
async def cancel_request(
    request_id: int,
    payload: CancelPayload,
    session: SessionDep,
    auth: AuthDep,
    today: TodayDep,
) -> Envelope[LeaveRequestResponse]:
    """Cancel a pending or approved leave request before it starts."""
    leave_request = await request_service.cancel_request(session, auth, request_id, payload, today)
    return Envelope(message="Leave request cancelled successfully", data=leave_request)
