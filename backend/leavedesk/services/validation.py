"""Pure business-rule checks for employees and leave requests.

Every check returns a list of :class:`Violation` instead of raising, so callers
can report all broken rules at once and decide how to surface them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import TYPE_CHECKING

from leavedesk.config import get_settings
from leavedesk.exceptions import Violation
from leavedesk.models.enums import LeaveType
from leavedesk.services.duration import count_working_days

if TYPE_CHECKING:
    from leavedesk.config import Settings


@dataclass(frozen=True)
class LeaveRules:
    """Tunable limits applied by the validators."""

    min_notice_days: int = 3
    max_working_days: int = 30
    min_reason_length: int = 5
    max_reason_length: int = 500
    min_rejection_comment_length: int = 10
    max_joining_years_back: int = 10

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LeaveRules:
        settings = settings or get_settings()
        return cls(
            min_notice_days=settings.min_notice_days,
            max_working_days=settings.max_working_days,
            min_reason_length=settings.min_reason_length,
            max_reason_length=settings.max_reason_length,
            min_rejection_comment_length=settings.min_rejection_comment_length,
            max_joining_years_back=settings.max_joining_years_back,
        )


DEFAULT_RULES = LeaveRules()


@dataclass
class RequestCheck:
    """Outcome of validating a leave request."""

    working_days: int
    violations: list[Violation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.violations


def _years_back(today: date, years: int) -> date:
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year.
        return today.replace(year=today.year - years, day=28)


def validate_joining_date(joining_date: date, today: date, rules: LeaveRules = DEFAULT_RULES) -> list[Violation]:
    """Joining date may be neither in the future nor too far in the past."""
    if joining_date > today:
        return [Violation("joining_date_in_future", "Joining date cannot be in the future")]
    if joining_date < _years_back(today, rules.max_joining_years_back):
        return [
            Violation(
                "joining_date_too_old",
                f"Joining date cannot be more than {rules.max_joining_years_back} years ago",
            )
        ]
    return []


def validate_leave_request(
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    reason: str | None,
    *,
    today: date,
    rules: LeaveRules = DEFAULT_RULES,
    joining_date: date | None = None,
    available_balance: int | None = None,
) -> RequestCheck:
    """Check a prospective leave request against every submission rule.

    ``available_balance`` is the employee's balance for the leave type, or
    None when the type carries no balance (emergency leave).
    """
    violations: list[Violation] = []

    if start_date > end_date:
        violations.append(Violation("invalid_date_range", "End date must be on or after start date"))

    if start_date < today:
        violations.append(Violation("start_in_past", "Cannot apply for leave in the past"))

    if leave_type == LeaveType.ANNUAL and start_date < today + timedelta(days=rules.min_notice_days):
        violations.append(
            Violation(
                "insufficient_notice",
                f"Annual leave requires at least {rules.min_notice_days} days notice",
            )
        )

    if joining_date is not None and start_date < joining_date:
        violations.append(Violation("before_joining_date", "Leave cannot start before the employee's joining date"))

    working_days = count_working_days(start_date, end_date)
    if start_date <= end_date:
        if working_days > rules.max_working_days:
            violations.append(
                Violation(
                    "duration_too_long",
                    f"Leave duration cannot exceed {rules.max_working_days} working days",
                )
            )
        if working_days < 1:
            violations.append(Violation("duration_too_short", "Leave duration must be at least 1 working day"))

    stripped = (reason or "").strip()
    if len(stripped) < rules.min_reason_length:
        violations.append(
            Violation("reason_too_short", f"Reason must be at least {rules.min_reason_length} characters long")
        )
    elif len(stripped) > rules.max_reason_length:
        violations.append(
            Violation("reason_too_long", f"Reason cannot exceed {rules.max_reason_length} characters")
        )

    if available_balance is not None and working_days > available_balance:
        violations.append(insufficient_balance(leave_type, available_balance, working_days))

    return RequestCheck(working_days=working_days, violations=violations)


def insufficient_balance(leave_type: str, available: int, requested: int) -> Violation:
    return Violation(
        "insufficient_balance",
        f"Insufficient {leave_type} leave balance: {available} days available, {requested} requested",
    )


def validate_rejection_comments(comments: str | None, rules: LeaveRules = DEFAULT_RULES) -> list[Violation]:
    """Rejections must explain themselves."""
    if comments is None or not comments.strip():
        return [Violation("comments_required", "Comments are required when rejecting a leave request")]
    if len(comments.strip()) < rules.min_rejection_comment_length:
        return [
            Violation(
                "comments_too_short",
                f"Rejection comments must be at least {rules.min_rejection_comment_length} characters long",
            )
        ]
    return []
