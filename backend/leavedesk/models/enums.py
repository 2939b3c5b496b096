from __future__ import annotations

import enum


class Department(enum.StrEnum):
    """Fixed set of departments an employee can belong to."""

    ENGINEERING = "Engineering"
    HR = "HR"
    FINANCE = "Finance"
    MARKETING = "Marketing"
    SALES = "Sales"
    OPERATIONS = "Operations"


class LeaveType(enum.StrEnum):
    """Kind of leave being requested."""

    ANNUAL = "annual"
    SICK = "sick"
    EMERGENCY = "emergency"


class BalanceType(enum.StrEnum):
    """Leave types that carry a tracked balance."""

    ANNUAL = "annual"
    SICK = "sick"


class BalanceOperation(enum.StrEnum):
    """Direction of a balance adjustment."""

    ADD = "add"
    SUBTRACT = "subtract"


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class LedgerSourceType(enum.StrEnum):
    """Origin of a balance ledger entry."""

    APPROVAL = "APPROVAL"
    CANCELLATION = "CANCELLATION"
    MANUAL = "MANUAL"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    EMPLOYEE = "EMPLOYEE"
    REQUEST = "REQUEST"
    ADJUSTMENT = "ADJUSTMENT"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    DEACTIVATE = "DEACTIVATE"
    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    CANCEL = "CANCEL"
    ADJUST = "ADJUST"
