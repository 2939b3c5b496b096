from __future__ import annotations

import enum
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlmodel import col

from leavedesk.models.audit import AuditLog
from leavedesk.models.enums import AuditEntityType

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from leavedesk.models.enums import AuditAction


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Dump a row as JSON-safe values (ISO dates, plain enum values)."""
    data: dict[str, Any] = {}
    for key, value in model.model_dump().items():
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        elif isinstance(value, enum.Enum):
            value = value.value
        data[key] = value
    return data


def _affected_employee(
    entity_type: AuditEntityType,
    entity_id: int,
    snapshots: tuple[dict[str, Any] | None, ...],
) -> int | None:
    if entity_type == AuditEntityType.EMPLOYEE:
        return entity_id
    for snapshot in snapshots:
        if snapshot and snapshot.get("employee_id") is not None:
            return snapshot["employee_id"]
    return None


async def write_audit_log(
    session: AsyncSession,
    *,
    actor_id: int | None,
    entity_type: AuditEntityType,
    entity_id: int,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
    employee_id: int | None = None,
    days_delta: int | None = None,
) -> AuditLog:
    """Add an audit row to the caller's transaction.

    The affected employee and, for leave requests, the status transition are
    read off the snapshots unless given explicitly.
    """
    if employee_id is None:
        employee_id = _affected_employee(entity_type, entity_id, (after_json, before_json))

    from_status = to_status = None
    if entity_type == AuditEntityType.REQUEST:
        from_status = before_json.get("status") if before_json else None
        to_status = after_json.get("status") if after_json else None

    entry = AuditLog(
        actor_id=actor_id,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        employee_id=employee_id,
        from_status=from_status,
        to_status=to_status,
        days_delta=days_delta,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def list_employee_audit_trail(session: AsyncSession, employee_id: int) -> list[AuditLog]:
    """Every audit row touching one employee, oldest first."""
    stmt = (
        select(AuditLog)
        .where(col(AuditLog.employee_id) == employee_id)
        .order_by(col(AuditLog.created_at), col(AuditLog.id))
    )
    return list((await session.execute(stmt)).scalars().all())
