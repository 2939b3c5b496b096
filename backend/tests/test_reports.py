"""Tests for the leave statistics overview."""

from __future__ import annotations

from typing import TYPE_CHECKING

from conftest import HR_HEADERS, create_employee

if TYPE_CHECKING:
    from httpx import AsyncClient

OVERVIEW_URL = "/api/leave-requests/stats/overview"


async def _submit(client: AsyncClient, employee_id: int, leave_type: str, start: str, end: str) -> int:
    resp = await client.post(
        "/api/leave-requests",
        json={
            "employee_id": employee_id,
            "leave_type": leave_type,
            "start_date": start,
            "end_date": end,
            "reason": "Scheduled time off",
        },
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["id"]


async def test_overview_breakdown_and_upcoming(async_client: AsyncClient) -> None:
    employee = await create_employee(async_client)
    approver = await create_employee(async_client, name="Priya Patel", email="priya@acme.com", department="HR")

    sick = await _submit(async_client, employee["id"], "sick", "2024-06-17", "2024-06-18")
    annual = await _submit(async_client, employee["id"], "annual", "2024-06-25", "2024-06-27")
    await _submit(async_client, employee["id"], "annual", "2024-07-01", "2024-07-02")
    for request_id in (sick, annual):
        resp = await async_client.put(
            f"/api/leave-requests/{request_id}/approve",
            json={"approved_by": approver["id"]},
            headers=HR_HEADERS,
        )
        assert resp.status_code == 200

    resp = await async_client.get(OVERVIEW_URL)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["year"] == 2024
    assert data["pending_count"] == 1
    assert data["upcoming_window_days"] == 7

    rows = {(r["department"], r["leave_type"], r["status"]): r for r in data["breakdown"]}
    assert rows[("Engineering", "annual", "approved")]["total_days"] == 3
    assert rows[("Engineering", "annual", "pending")]["request_count"] == 1
    assert rows[("Engineering", "sick", "approved")]["avg_days_per_request"] == 2.0
    assert len(rows) == 3

    # Only the sick leave starts within a week of 2024-06-15.
    assert [r["id"] for r in data["upcoming_leaves"]] == [sick]
    assert data["upcoming_leaves"][0]["employee_name"] == "Arjun Sharma"


async def test_overview_for_another_year_is_empty(async_client: AsyncClient) -> None:
    employee = await create_employee(async_client)
    await _submit(async_client, employee["id"], "sick", "2024-06-17", "2024-06-17")

    resp = await async_client.get(OVERVIEW_URL, params={"year": 2023})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["year"] == 2023
    assert data["breakdown"] == []
    assert data["pending_count"] == 1
