"""Tests for the pure leave request and joining date validators."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from leavedesk.models.enums import LeaveType
from leavedesk.services.validation import (
    DEFAULT_RULES,
    LeaveRules,
    RequestCheck,
    validate_joining_date,
    validate_leave_request,
    validate_rejection_comments,
)

TODAY = date(2024, 6, 10)  # Monday
VALID_REASON = "Family wedding out of town"


def _codes(check: RequestCheck) -> list[str]:
    return [v.code for v in check.violations]


# ---------------------------------------------------------------------------
# Leave request rules
# ---------------------------------------------------------------------------


def test_valid_annual_request_has_no_violations() -> None:
    check = validate_leave_request(
        LeaveType.ANNUAL, date(2024, 6, 17), date(2024, 6, 19), VALID_REASON, today=TODAY, available_balance=24
    )
    assert check.valid
    assert check.working_days == 3


def test_end_before_start_is_rejected() -> None:
    check = validate_leave_request(
        LeaveType.SICK, date(2024, 6, 20), date(2024, 6, 18), VALID_REASON, today=TODAY
    )
    assert "invalid_date_range" in _codes(check)
    assert "duration_too_short" not in _codes(check)


def test_start_in_past_is_rejected() -> None:
    check = validate_leave_request(
        LeaveType.SICK, TODAY - timedelta(days=1), TODAY, VALID_REASON, today=TODAY
    )
    assert "start_in_past" in _codes(check)


def test_annual_leave_starting_today_violates_notice() -> None:
    check = validate_leave_request(LeaveType.ANNUAL, TODAY, TODAY, VALID_REASON, today=TODAY)
    assert not check.valid
    assert "insufficient_notice" in _codes(check)


@pytest.mark.parametrize("leave_type", [LeaveType.SICK, LeaveType.EMERGENCY])
def test_same_day_sick_and_emergency_are_allowed(leave_type: LeaveType) -> None:
    check = validate_leave_request(leave_type, TODAY, TODAY, VALID_REASON, today=TODAY)
    assert check.valid


def test_notice_boundary_is_inclusive_of_third_day() -> None:
    two_days = validate_leave_request(
        LeaveType.ANNUAL, TODAY + timedelta(days=2), TODAY + timedelta(days=2), VALID_REASON, today=TODAY
    )
    three_days = validate_leave_request(
        LeaveType.ANNUAL, TODAY + timedelta(days=3), TODAY + timedelta(days=3), VALID_REASON, today=TODAY
    )
    assert "insufficient_notice" in _codes(two_days)
    assert three_days.valid


def test_weekend_only_request_is_too_short() -> None:
    check = validate_leave_request(
        LeaveType.SICK, date(2024, 6, 15), date(2024, 6, 16), VALID_REASON, today=TODAY
    )
    assert check.working_days == 0
    assert "duration_too_short" in _codes(check)


def test_more_than_thirty_working_days_is_too_long() -> None:
    # 2024-07-01 (Mon) .. 2024-08-12 (Mon) is six full weeks plus one day.
    check = validate_leave_request(
        LeaveType.ANNUAL, date(2024, 7, 1), date(2024, 8, 12), VALID_REASON, today=TODAY
    )
    assert check.working_days == 31
    assert "duration_too_long" in _codes(check)


def test_exactly_thirty_working_days_is_allowed() -> None:
    # 2024-07-01 (Mon) .. 2024-08-09 (Fri) is six full working weeks.
    check = validate_leave_request(
        LeaveType.ANNUAL, date(2024, 7, 1), date(2024, 8, 9), VALID_REASON, today=TODAY, available_balance=30
    )
    assert check.working_days == 30
    assert check.valid


@pytest.mark.parametrize(
    ("reason", "code"),
    [("", "reason_too_short"), ("  ab  ", "reason_too_short"), ("x" * 501, "reason_too_long")],
)
def test_reason_length_bounds(reason: str, code: str) -> None:
    check = validate_leave_request(LeaveType.SICK, TODAY, TODAY, reason, today=TODAY)
    assert _codes(check) == [code]


def test_start_before_joining_date_is_rejected() -> None:
    check = validate_leave_request(
        LeaveType.SICK,
        TODAY,
        TODAY,
        VALID_REASON,
        today=TODAY,
        joining_date=TODAY + timedelta(days=1),
    )
    assert "before_joining_date" in _codes(check)


def test_insufficient_balance_is_reported() -> None:
    check = validate_leave_request(
        LeaveType.ANNUAL, date(2024, 6, 17), date(2024, 6, 21), VALID_REASON, today=TODAY, available_balance=4
    )
    assert _codes(check) == ["insufficient_balance"]
    assert "4 days available, 5 requested" in check.violations[0].message


def test_emergency_leave_skips_balance_check() -> None:
    check = validate_leave_request(
        LeaveType.EMERGENCY, TODAY, TODAY + timedelta(days=4), VALID_REASON, today=TODAY, available_balance=None
    )
    assert check.valid


def test_all_violations_are_reported_together() -> None:
    check = validate_leave_request(
        LeaveType.ANNUAL, TODAY - timedelta(days=3), TODAY - timedelta(days=5), "no", today=TODAY
    )
    assert set(_codes(check)) == {"invalid_date_range", "start_in_past", "insufficient_notice", "reason_too_short"}


def test_custom_rules_apply() -> None:
    rules = LeaveRules(min_notice_days=7, max_working_days=2, min_reason_length=1)
    check = validate_leave_request(
        LeaveType.ANNUAL, TODAY + timedelta(days=3), TODAY + timedelta(days=7), "x", today=TODAY, rules=rules
    )
    assert set(_codes(check)) == {"insufficient_notice", "duration_too_long"}


# ---------------------------------------------------------------------------
# Joining date and rejection comments
# ---------------------------------------------------------------------------


def test_joining_date_rules() -> None:
    assert validate_joining_date(TODAY, TODAY) == []
    assert validate_joining_date(date(2014, 6, 10), TODAY) == []
    assert [v.code for v in validate_joining_date(TODAY + timedelta(days=1), TODAY)] == ["joining_date_in_future"]
    assert [v.code for v in validate_joining_date(date(2014, 6, 9), TODAY)] == ["joining_date_too_old"]


def test_joining_date_window_handles_leap_day() -> None:
    assert validate_joining_date(date(2014, 2, 28), date(2024, 2, 29)) == []


@pytest.mark.parametrize(
    ("comments", "expected"),
    [
        (None, ["comments_required"]),
        ("   ", ["comments_required"]),
        ("Too busy", ["comments_too_short"]),
        ("Team is short-staffed that week", []),
    ],
)
def test_rejection_comments(comments: str | None, expected: list[str]) -> None:
    assert [v.code for v in validate_rejection_comments(comments, DEFAULT_RULES)] == expected
