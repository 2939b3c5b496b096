"""Tests for the balance view, manual adjustments and the balance ledger."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from conftest import EMPLOYEE_HEADERS, HR_HEADERS, create_employee
from leavedesk.exceptions import NotFoundError
from leavedesk.models.employee import Employee
from leavedesk.models.enums import BalanceOperation, BalanceType, LedgerSourceType
from leavedesk.services.audit import list_employee_audit_trail
from leavedesk.services.balance import adjust_balance, balance_for, balance_type_for

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession


def _balance_url(employee_id: int) -> str:
    return f"/api/employees/{employee_id}/leave-balance"


def _adjustment(
    leave_type: str = "annual", days: int = 2, operation: str = "subtract", reason: str = "Manual correction"
) -> dict:
    return {"leave_type": leave_type, "days": days, "operation": operation, "reason": reason}


# ---------------------------------------------------------------------------
# Balance view
# ---------------------------------------------------------------------------


async def test_leave_balance_view(async_client: AsyncClient) -> None:
    employee = await create_employee(async_client, joining_date="2024-06-01")
    resp = await async_client.get(_balance_url(employee["id"]))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["employee_name"] == "Arjun Sharma"
    annual = data["leave_balances"]["annual"]
    assert annual == {
        "total_entitlement": 24,
        "remaining_balance": 14,
        "used": 10,
        "utilization_percentage": 41.7,
    }
    assert data["leave_balances"]["sick"]["utilization_percentage"] == 0.0


async def test_leave_balance_of_missing_employee_is_404(async_client: AsyncClient) -> None:
    resp = await async_client.get(_balance_url(404))
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Manual adjustments
# ---------------------------------------------------------------------------


async def test_manual_subtract_and_add(async_client: AsyncClient) -> None:
    employee = await create_employee(async_client)

    resp = await async_client.put(_balance_url(employee["id"]), json=_adjustment(days=4), headers=HR_HEADERS)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["annual_leave_balance"] == 20
    assert data["sick_leave_balance"] == 12

    resp = await async_client.put(
        _balance_url(employee["id"]),
        json=_adjustment(leave_type="sick", days=3, operation="add"),
        headers=HR_HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["sick_leave_balance"] == 15


async def test_manual_adjustments_are_audited_against_the_employee(
    async_client: AsyncClient, db_session: AsyncSession
) -> None:
    employee = await create_employee(async_client)
    await async_client.put(_balance_url(employee["id"]), json=_adjustment(days=4), headers=HR_HEADERS)
    await async_client.put(
        _balance_url(employee["id"]),
        json=_adjustment(leave_type="sick", days=3, operation="add"),
        headers=HR_HEADERS,
    )

    trail = await list_employee_audit_trail(db_session, employee["id"])

    assert [(row.action, row.days_delta) for row in trail] == [("CREATE", None), ("ADJUST", -4), ("ADJUST", 3)]
    assert trail[1].entity_type == "ADJUSTMENT"
    assert trail[1].before_json["annual_leave_balance"] == 24
    assert trail[1].after_json["annual_leave_balance"] == 20


async def test_manual_subtract_beyond_balance_is_rejected(async_client: AsyncClient) -> None:
    employee = await create_employee(async_client)
    resp = await async_client.put(
        _balance_url(employee["id"]), json=_adjustment(leave_type="sick", days=13), headers=HR_HEADERS
    )
    assert resp.status_code == 422
    assert resp.json()["data"]["violations"][0]["code"] == "insufficient_balance"

    balance = (await async_client.get(_balance_url(employee["id"]))).json()["data"]
    assert balance["leave_balances"]["sick"]["remaining_balance"] == 12


async def test_manual_adjustment_requires_reason(async_client: AsyncClient) -> None:
    employee = await create_employee(async_client)
    resp = await async_client.put(
        _balance_url(employee["id"]), json=_adjustment(reason="fix"), headers=HR_HEADERS
    )
    assert resp.status_code == 422
    assert resp.json()["data"]["violations"][0]["code"] == "reason_too_short"


@pytest.mark.parametrize(
    "payload",
    [
        _adjustment(leave_type="emergency"),
        _adjustment(days=0),
        _adjustment(days=-3),
        _adjustment(operation="multiply"),
    ],
)
async def test_manual_adjustment_shape_errors(async_client: AsyncClient, payload: dict) -> None:
    employee = await create_employee(async_client)
    resp = await async_client.put(_balance_url(employee["id"]), json=payload, headers=HR_HEADERS)
    assert resp.status_code == 400


async def test_manual_adjustment_requires_approver_role(async_client: AsyncClient) -> None:
    employee = await create_employee(async_client)
    resp = await async_client.put(_balance_url(employee["id"]), json=_adjustment(), headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 403


async def test_ledger_lists_manual_adjustments(async_client: AsyncClient) -> None:
    employee = await create_employee(async_client)
    await async_client.put(_balance_url(employee["id"]), json=_adjustment(days=4), headers=HR_HEADERS)
    await async_client.put(
        _balance_url(employee["id"]),
        json=_adjustment(leave_type="sick", days=1, operation="add", reason="Overtime credit"),
        headers=HR_HEADERS,
    )

    resp = await async_client.get(f"/api/employees/{employee['id']}/ledger")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total"] == 2
    newest, oldest = data["items"]
    assert newest["leave_type"] == "sick"
    assert newest["days"] == 1
    assert newest["balance_after"] == 13
    assert oldest["days"] == -4
    assert oldest["balance_after"] == 20
    assert oldest["source_type"] == "MANUAL"
    assert oldest["created_by"] == 1

    resp = await async_client.get(f"/api/employees/{employee['id']}/ledger", params={"leave_type": "annual"})
    assert resp.json()["data"]["total"] == 1


# ---------------------------------------------------------------------------
# Ledger service
# ---------------------------------------------------------------------------


async def _insert_employee(session: AsyncSession, **overrides: object) -> Employee:
    fields: dict[str, object] = {
        "name": "Rajesh Kumar",
        "email": "rajesh@acme.com",
        "department": "Finance",
        "joining_date": date(2023, 6, 1),
    }
    fields.update(overrides)
    employee = Employee(**fields)
    session.add(employee)
    await session.commit()
    return employee


async def test_adjust_balance_records_signed_entry(db_session: AsyncSession) -> None:
    employee = await _insert_employee(db_session)
    entry = await adjust_balance(
        db_session,
        employee.id,  # type: ignore[arg-type]
        BalanceType.ANNUAL,
        5,
        BalanceOperation.SUBTRACT,
        source_type=LedgerSourceType.APPROVAL,
        source_id=7,
    )
    await db_session.commit()

    assert entry.days == -5
    assert entry.balance_after == 19
    assert employee.annual_leave_balance == 19
    assert employee.version == 2


async def test_adjust_balance_rejects_non_positive_days(db_session: AsyncSession) -> None:
    employee = await _insert_employee(db_session)
    with pytest.raises(ValueError, match="positive"):
        await adjust_balance(
            db_session,
            employee.id,  # type: ignore[arg-type]
            BalanceType.SICK,
            0,
            BalanceOperation.ADD,
            source_type=LedgerSourceType.MANUAL,
        )


async def test_adjust_balance_unknown_employee(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await adjust_balance(
            db_session, 123, BalanceType.SICK, 1, BalanceOperation.ADD, source_type=LedgerSourceType.MANUAL
        )


def test_balance_type_mapping() -> None:
    assert balance_type_for("annual") == BalanceType.ANNUAL
    assert balance_type_for("sick") == BalanceType.SICK
    assert balance_type_for("emergency") is None


def test_balance_for_reads_matching_column() -> None:
    employee = Employee(
        name="x",
        email="x@acme.com",
        department="HR",
        joining_date=date(2024, 1, 1),
        annual_leave_balance=20,
        sick_leave_balance=9,
    )
    assert balance_for(employee, "annual") == 20
    assert balance_for(employee, "sick") == 9
    assert balance_for(employee, "emergency") is None
