"""Initial leave entitlements for newly registered employees."""

from __future__ import annotations

import calendar
from datetime import date

DEFAULT_ANNUAL_ENTITLEMENT = 24
DEFAULT_SICK_ENTITLEMENT = 12


def days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def initial_annual_entitlement(
    joining_date: date,
    as_of: date,
    full_entitlement: int = DEFAULT_ANNUAL_ENTITLEMENT,
) -> int:
    """Pro-rate the annual entitlement by the share of ``as_of.year`` left at joining.

    Remaining days count from the joining date through Dec 31 inclusive,
    over the actual length of the year, and the result is floored. Joining
    on or before Jan 1 yields the full entitlement.
    """
    year_start = date(as_of.year, 1, 1)
    year_end = date(as_of.year, 12, 31)

    if joining_date <= year_start:
        return full_entitlement
    if joining_date > year_end:
        return 0

    remaining_days = (year_end - joining_date).days + 1
    return (full_entitlement * remaining_days) // days_in_year(as_of.year)


def initial_sick_entitlement(full_entitlement: int = DEFAULT_SICK_ENTITLEMENT) -> int:
    """Sick leave is a flat entitlement regardless of joining date."""
    return full_entitlement
