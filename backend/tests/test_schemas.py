"""Unit tests for request payload schemas."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from leavedesk.models.enums import BalanceOperation, BalanceType, Department, LeaveType
from leavedesk.schemas.balance import BalanceAdjustmentPayload
from leavedesk.schemas.common import Envelope, ErrorEnvelope
from leavedesk.schemas.employee import CreateEmployeeRequest
from leavedesk.schemas.request import CancelPayload, RejectPayload, SubmitLeavePayload

# ---------------------------------------------------------------------------
# CreateEmployeeRequest
# ---------------------------------------------------------------------------


def test_create_employee_strips_name() -> None:
    body = CreateEmployeeRequest(
        name="  Rohan Mehta  ",
        email="rohan.mehta@acme.com",
        department="Marketing",
        joining_date=date(2023, 3, 1),
    )
    assert body.name == "Rohan Mehta"
    assert body.department is Department.MARKETING


def test_create_employee_rejects_blank_name() -> None:
    with pytest.raises(ValidationError, match="Name is required"):
        CreateEmployeeRequest(
            name="   ",
            email="rohan.mehta@acme.com",
            department="Marketing",
            joining_date=date(2023, 3, 1),
        )


def test_create_employee_rejects_bad_email() -> None:
    with pytest.raises(ValidationError):
        CreateEmployeeRequest(
            name="Rohan Mehta",
            email="not-an-email",
            department="Marketing",
            joining_date=date(2023, 3, 1),
        )


def test_create_employee_rejects_unknown_department() -> None:
    with pytest.raises(ValidationError):
        CreateEmployeeRequest(
            name="Rohan Mehta",
            email="rohan.mehta@acme.com",
            department="Legal",
            joining_date=date(2023, 3, 1),
        )


# ---------------------------------------------------------------------------
# Leave request payloads
# ---------------------------------------------------------------------------


def test_submit_payload_accepts_reversed_dates() -> None:
    # Date ordering is a business rule, not a shape error.
    body = SubmitLeavePayload(
        employee_id=1,
        leave_type="annual",
        start_date=date(2024, 7, 5),
        end_date=date(2024, 7, 1),
        reason="Family trip",
    )
    assert body.leave_type is LeaveType.ANNUAL


@pytest.mark.parametrize("employee_id", [0, -3])
def test_submit_payload_requires_positive_employee_id(employee_id: int) -> None:
    with pytest.raises(ValidationError):
        SubmitLeavePayload(
            employee_id=employee_id,
            leave_type="sick",
            start_date=date(2024, 7, 1),
            end_date=date(2024, 7, 1),
            reason="Flu symptoms",
        )


def test_reject_payload_requires_comments() -> None:
    with pytest.raises(ValidationError):
        RejectPayload(approved_by=1)  # type: ignore[call-arg]
    with pytest.raises(ValidationError):
        RejectPayload(approved_by=1, comments="")


def test_cancel_payload_reason_is_optional() -> None:
    body = CancelPayload(employee_id=4)
    assert body.reason is None


# ---------------------------------------------------------------------------
# BalanceAdjustmentPayload
# ---------------------------------------------------------------------------


def test_adjustment_defaults_to_subtract() -> None:
    body = BalanceAdjustmentPayload(leave_type="annual", days=2, reason="Correction for March")
    assert body.operation is BalanceOperation.SUBTRACT
    assert body.leave_type is BalanceType.ANNUAL


@pytest.mark.parametrize("days", [0, -1, 367])
def test_adjustment_days_bounds(days: int) -> None:
    with pytest.raises(ValidationError):
        BalanceAdjustmentPayload(leave_type="sick", days=days, reason="Correction for March")


def test_adjustment_rejects_emergency_leave() -> None:
    with pytest.raises(ValidationError):
        BalanceAdjustmentPayload(leave_type="emergency", days=1, reason="Correction for March")


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


def test_envelope_defaults() -> None:
    envelope = Envelope[int](message="ok", data=3)
    assert envelope.model_dump() == {"success": True, "message": "ok", "data": 3}


def test_error_envelope_defaults() -> None:
    envelope = ErrorEnvelope(message="Employee not found", error="NotFoundError")
    assert envelope.success is False
    assert envelope.data is None
