from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from leavedesk.models.enums import BalanceOperation, BalanceType, LedgerSourceType

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class BalanceDetail(BaseModel):
    """Balance figures for one leave type."""

    total_entitlement: int
    remaining_balance: int
    used: int
    utilization_percentage: float


class LeaveBalanceResponse(BaseModel):
    """All tracked balances for an employee."""

    employee_id: int
    employee_name: str
    department: str
    joining_date: date
    leave_balances: dict[str, BalanceDetail]


# ---------------------------------------------------------------------------
# Ledger response schemas
# ---------------------------------------------------------------------------


class LedgerEntryResponse(BaseModel):
    """A single balance ledger entry."""

    id: int
    employee_id: int
    leave_type: BalanceType
    days: int
    balance_after: int
    source_type: LedgerSourceType
    source_id: int | None
    reason: str | None
    created_by: int | None
    created_at: datetime


class LedgerListResponse(BaseModel):
    """Paginated ledger entries."""

    items: list[LedgerEntryResponse]
    total: int


# ---------------------------------------------------------------------------
# Manual adjustment
# ---------------------------------------------------------------------------


class BalanceAdjustmentPayload(BaseModel):
    """Request body for a manual balance adjustment."""

    leave_type: BalanceType
    days: int = Field(gt=0, le=366)
    operation: BalanceOperation = BalanceOperation.SUBTRACT
    reason: str = Field(max_length=500)


class BalanceAdjustmentResponse(BaseModel):
    """Outcome of a manual balance adjustment."""

    employee_id: int
    employee_name: str
    leave_type: BalanceType
    days: int
    operation: BalanceOperation
    reason: str
    annual_leave_balance: int
    sick_leave_balance: int
