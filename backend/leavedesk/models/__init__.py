from sqlmodel import SQLModel

from leavedesk.models.audit import AuditLog
from leavedesk.models.base import IntIdBase, TimestampMixin
from leavedesk.models.employee import Employee
from leavedesk.models.enums import (
    AuditAction,
    AuditEntityType,
    BalanceOperation,
    BalanceType,
    Department,
    LeaveType,
    LedgerSourceType,
    RequestStatus,
)
from leavedesk.models.ledger import LeaveBalanceEntry
from leavedesk.models.policy import LeavePolicy
from leavedesk.models.request import LeaveRequest

__all__ = [
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "BalanceOperation",
    "BalanceType",
    "Department",
    "Employee",
    "IntIdBase",
    "LeaveBalanceEntry",
    "LeavePolicy",
    "LeaveRequest",
    "LeaveType",
    "LedgerSourceType",
    "RequestStatus",
    "SQLModel",
    "TimestampMixin",
]
