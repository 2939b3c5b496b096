"""Seed script for development data.

Run with:  python -m leavedesk.seed   (from the backend/ directory)
Inside Docker:  docker compose exec api python -m leavedesk.seed
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"
API_URL = f"{BASE_URL}/api"

HR_HEADERS = {
    "Content-Type": "application/json",
    "X-Role": "hr",
}

EMPLOYEES = [
    {
        "name": "Arjun Sharma",
        "email": "arjun.sharma@symplora.com",
        "department": "Engineering",
        "joining_date": "2023-01-15",
    },
    {
        "name": "Priya Patel",
        "email": "priya.patel@symplora.com",
        "department": "HR",
        "joining_date": "2023-03-10",
    },
    {
        "name": "Rajesh Kumar",
        "email": "rajesh.kumar@symplora.com",
        "department": "Finance",
        "joining_date": "2023-06-01",
    },
    {
        "name": "Sneha Reddy",
        "email": "sneha.reddy@symplora.com",
        "department": "Marketing",
        "joining_date": "2023-08-20",
    },
    {
        "name": "Vikram Singh",
        "email": "vikram.singh@symplora.com",
        "department": "Engineering",
        "joining_date": "2023-11-05",
    },
    {
        "name": "Kavya Nair",
        "email": "kavya.nair@symplora.com",
        "department": "Sales",
        "joining_date": "2024-01-10",
    },
    {
        "name": "Rohit Agarwal",
        "email": "rohit.agarwal@symplora.com",
        "department": "Operations",
        "joining_date": "2024-02-15",
    },
    {
        "name": "Ananya Gupta",
        "email": "ananya.gupta@symplora.com",
        "department": "Engineering",
        "joining_date": "2024-03-20",
    },
]


def _next_monday(today: date, days_ahead: int) -> date:
    """First Monday at least ``days_ahead`` days from today."""
    day = today + timedelta(days=days_ahead)
    while day.weekday() != 0:
        day += timedelta(days=1)
    return day


async def _safe_post(client: httpx.AsyncClient, url: str, json: dict, label: str) -> dict | None:
    """POST tolerating 409 conflicts so the script can be re-run."""
    resp = await client.post(url, json=json, headers=HR_HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()["data"]
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already exists)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def seed_employees(client: httpx.AsyncClient) -> dict[str, int]:
    """Register demo employees and return an email->id mapping."""
    print("\n--- Seeding employees ---")
    for emp in EMPLOYEES:
        await _safe_post(client, f"{API_URL}/employees", emp, emp["name"])

    resp = await client.get(f"{API_URL}/employees", headers=HR_HEADERS)
    resp.raise_for_status()
    return {e["email"]: e["id"] for e in resp.json()["data"]}


async def seed_requests(client: httpx.AsyncClient, employee_ids: dict[str, int]) -> None:
    """Submit a few leave requests; approve one of them."""
    print("\n--- Seeding leave requests ---")
    today = date.today()
    arjun = employee_ids.get("arjun.sharma@symplora.com")
    priya = employee_ids.get("priya.patel@symplora.com")
    kavya = employee_ids.get("kavya.nair@symplora.com")
    if arjun is None or priya is None or kavya is None:
        print("  [SKIP] demo employees missing")
        return

    # Arjun: 3-day annual leave two weeks out, approved by Priya (HR)
    start = _next_monday(today, 14)
    created = await _safe_post(
        client,
        f"{API_URL}/leave-requests",
        {
            "employee_id": arjun,
            "leave_type": "annual",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=2)).isoformat(),
            "reason": "Family trip to Jaipur",
        },
        "Request: Arjun 3-day annual leave",
    )
    if created:
        resp = await client.put(
            f"{API_URL}/leave-requests/{created['id']}/approve",
            json={"approved_by": priya, "comments": "Enjoy the trip"},
            headers=HR_HEADERS,
        )
        if resp.status_code == 200:
            print("  [OK] Approved Arjun's annual leave")
        else:
            print(f"  [ERROR] Approving Arjun's request: {resp.status_code} {resp.text[:200]}")

    # Kavya: 1-day sick leave tomorrow, stays pending
    tomorrow = today + timedelta(days=1)
    while tomorrow.weekday() >= 5:
        tomorrow += timedelta(days=1)
    await _safe_post(
        client,
        f"{API_URL}/leave-requests",
        {
            "employee_id": kavya,
            "leave_type": "sick",
            "start_date": tomorrow.isoformat(),
            "end_date": tomorrow.isoformat(),
            "reason": "Doctor appointment",
        },
        "Request: Kavya 1-day sick leave (pending)",
    )


async def main() -> None:
    print("=" * 60)
    print("  LeaveDesk - Development Seed Script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        employee_ids = await seed_employees(client)
        await seed_requests(client, employee_ids)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
