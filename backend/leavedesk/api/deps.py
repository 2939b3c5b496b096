# ruff: noqa: B008
from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import Depends, Header

from leavedesk.config import get_settings
from leavedesk.exceptions import UnauthorizedError
from leavedesk.schemas.auth import AuthContext
from leavedesk.services.validation import LeaveRules


async def get_auth_context(
    x_user_id: int | None = Header(default=None),
    x_role: str | None = Header(default=None),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    role = (x_role or get_settings().default_role).strip().lower()
    return AuthContext(user_id=x_user_id, role=role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_approver(
    auth: AuthDep,
) -> AuthContext:
    """Require an HR, manager or admin role for the request."""
    if not auth.can_approve:
        raise UnauthorizedError("HR or manager access required")
    return auth


ApproverDep = Annotated[AuthContext, Depends(require_approver)]


def get_today() -> date:
    """Calendar date used for notice, past-date and cancellation rules."""
    return date.today()


TodayDep = Annotated[date, Depends(get_today)]


def get_leave_rules() -> LeaveRules:
    return LeaveRules.from_settings()


RulesDep = Annotated[LeaveRules, Depends(get_leave_rules)]
