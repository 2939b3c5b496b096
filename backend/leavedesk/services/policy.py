from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leavedesk.models.enums import Department, LeaveType
from leavedesk.models.policy import LeavePolicy
from leavedesk.schemas.policy import LeavePolicyResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# (department, leave type) -> (annual entitlement, max consecutive days, min notice days)
DEFAULT_POLICIES: dict[tuple[Department, LeaveType], tuple[int, int, int]] = {
    (Department.ENGINEERING, LeaveType.ANNUAL): (24, 10, 7),
    (Department.ENGINEERING, LeaveType.SICK): (12, 5, 0),
    (Department.HR, LeaveType.ANNUAL): (26, 15, 7),
    (Department.HR, LeaveType.SICK): (12, 5, 0),
    (Department.FINANCE, LeaveType.ANNUAL): (24, 10, 7),
    (Department.FINANCE, LeaveType.SICK): (12, 5, 0),
    (Department.MARKETING, LeaveType.ANNUAL): (22, 10, 5),
    (Department.MARKETING, LeaveType.SICK): (12, 5, 0),
    (Department.SALES, LeaveType.ANNUAL): (22, 10, 5),
    (Department.SALES, LeaveType.SICK): (12, 5, 0),
    (Department.OPERATIONS, LeaveType.ANNUAL): (24, 10, 7),
    (Department.OPERATIONS, LeaveType.SICK): (12, 5, 0),
}


def _build_policy_response(policy: LeavePolicy) -> LeavePolicyResponse:
    return LeavePolicyResponse(
        id=policy.id,  # type: ignore[arg-type]
        department=Department(policy.department),
        leave_type=LeaveType(policy.leave_type),
        annual_entitlement=policy.annual_entitlement,
        max_consecutive_days=policy.max_consecutive_days,
        min_notice_days=policy.min_notice_days,
        carry_forward_allowed=policy.carry_forward_allowed,
        is_active=policy.is_active,
    )


async def seed_default_policies(session: AsyncSession) -> int:
    """Insert the default policy rows when the table is empty. Returns rows inserted."""
    count_result = await session.execute(select(func.count()).select_from(LeavePolicy))
    if count_result.scalar_one() > 0:
        return 0

    for (department, leave_type), (entitlement, max_days, notice) in DEFAULT_POLICIES.items():
        session.add(
            LeavePolicy(
                department=department.value,
                leave_type=leave_type.value,
                annual_entitlement=entitlement,
                max_consecutive_days=max_days,
                min_notice_days=notice,
            )
        )
    await session.commit()
    logger.info("Seeded %d default leave policies", len(DEFAULT_POLICIES))
    return len(DEFAULT_POLICIES)


async def list_policies(
    session: AsyncSession,
    department: Department | None = None,
) -> list[LeavePolicyResponse]:
    """List active leave policies, optionally for one department."""
    query = select(LeavePolicy).where(col(LeavePolicy.is_active).is_(True))
    if department is not None:
        query = query.where(col(LeavePolicy.department) == department.value)
    result = await session.execute(query.order_by(col(LeavePolicy.department), col(LeavePolicy.leave_type)))
    return [_build_policy_response(p) for p in result.scalars().all()]
