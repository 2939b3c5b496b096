from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import and_, or_, select
from sqlmodel import col

from leavedesk.models.enums import RequestStatus
from leavedesk.models.request import LeaveRequest

if TYPE_CHECKING:
    from datetime import date

    from sqlalchemy.ext.asyncio import AsyncSession

ACTIVE_STATUSES = (RequestStatus.PENDING.value, RequestStatus.APPROVED.value)


async def find_overlapping_requests(
    session: AsyncSession,
    employee_id: int,
    start_date: date,
    end_date: date,
    exclude_request_id: int | None = None,
) -> list[LeaveRequest]:
    """Return the employee's pending/approved requests that intersect [start_date, end_date].

    Bounds are inclusive on both sides, so a request ending on the day another
    starts counts as overlapping. A match is any of: the new start falls inside
    an existing range, the new end falls inside it, or the existing range sits
    entirely within the new one.
    """
    start_col = col(LeaveRequest.start_date)
    end_col = col(LeaveRequest.end_date)

    query = select(LeaveRequest).where(
        col(LeaveRequest.employee_id) == employee_id,
        col(LeaveRequest.status).in_(ACTIVE_STATUSES),
        or_(
            and_(start_col <= start_date, end_col >= start_date),
            and_(start_col <= end_date, end_col >= end_date),
            and_(start_col >= start_date, end_col <= end_date),
        ),
    )
    if exclude_request_id is not None:
        query = query.where(col(LeaveRequest.id) != exclude_request_id)

    result = await session.execute(query.order_by(start_col))
    return list(result.scalars().all())
