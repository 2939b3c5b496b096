"""Reporting service: yearly request breakdown and upcoming approved leave."""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leavedesk.models.employee import Employee
from leavedesk.models.enums import RequestStatus
from leavedesk.models.request import LeaveRequest
from leavedesk.schemas.report import LeaveStatsOverview, LeaveStatsRow
from leavedesk.services.request import list_requests

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def get_leave_stats_overview(
    session: AsyncSession,
    today: date,
    year: int | None = None,
    window_days: int = 7,
) -> LeaveStatsOverview:
    """Request counts and days per (department, leave type, status) for a year.

    The year is matched on start_date. Upcoming leaves are approved requests
    starting between today and today + ``window_days`` inclusive.
    """
    year = year or today.year
    year_start = date(year, 1, 1)
    year_end = date(year, 12, 31)

    result = await session.execute(
        select(
            col(Employee.department),
            col(LeaveRequest.leave_type),
            col(LeaveRequest.status),
            func.count().label("request_count"),
            func.coalesce(func.sum(col(LeaveRequest.days_requested)), 0).label("total_days"),
        )
        .join(Employee, col(LeaveRequest.employee_id) == col(Employee.id))
        .where(col(LeaveRequest.start_date) >= year_start, col(LeaveRequest.start_date) <= year_end)
        .group_by(col(Employee.department), col(LeaveRequest.leave_type), col(LeaveRequest.status))
        .order_by(col(Employee.department), col(LeaveRequest.leave_type), col(LeaveRequest.status))
    )
    breakdown = [
        LeaveStatsRow(
            department=row.department,
            leave_type=row.leave_type,
            status=row.status,
            request_count=int(row.request_count),
            total_days=int(row.total_days),
            avg_days_per_request=round(int(row.total_days) / int(row.request_count), 1),
        )
        for row in result.all()
    ]

    pending_result = await session.execute(
        select(func.count())
        .select_from(LeaveRequest)
        .where(col(LeaveRequest.status) == RequestStatus.PENDING.value)
    )
    pending_count = pending_result.scalar_one()

    upcoming = await list_requests(
        session,
        status_filter=RequestStatus.APPROVED,
        start_date=today,
    )
    window_end = today + timedelta(days=window_days)
    upcoming = sorted(
        (r for r in upcoming if r.start_date <= window_end),
        key=lambda r: (r.start_date, r.id),
    )

    return LeaveStatsOverview(
        year=year,
        breakdown=breakdown,
        pending_count=pending_count,
        upcoming_window_days=window_days,
        upcoming_leaves=upcoming,
    )
