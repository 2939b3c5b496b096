# ruff: noqa: B008, TC001
from __future__ import annotations

from fastapi import APIRouter, Query

from leavedesk.db import SessionDep
from leavedesk.models.enums import Department
from leavedesk.schemas.common import Envelope
from leavedesk.schemas.policy import LeavePolicyResponse
from leavedesk.services import policy as policy_service

router = APIRouter(prefix="/leave-policies", tags=["policies"])


@router.get("", response_model=Envelope[list[LeavePolicyResponse]])
async def list_policies(
    session: SessionDep,
    department: Department | None = Query(default=None),
) -> Envelope[list[LeavePolicyResponse]]:
    """List the reference leave policies, optionally for one department."""
    policies = await policy_service.list_policies(session, department)
    return Envelope(message="Leave policies retrieved successfully", data=policies)
