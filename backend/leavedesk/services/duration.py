from __future__ import annotations

from datetime import date

# date.weekday(): Monday == 0 ... Saturday == 5, Sunday == 6.
_WEEKEND = frozenset({5, 6})
_WORKDAYS_PER_WEEK = 5


def count_working_days(start_date: date, end_date: date) -> int:
    """Count days in the inclusive range [start_date, end_date] that are not Sat/Sun.

    No holiday awareness. Returns 0 when end_date precedes start_date. Whole
    weeks are counted arithmetically, so the range may run up to ``date.max``.
    """
    if end_date < start_date:
        return 0

    span = (end_date - start_date).days + 1
    full_weeks, remainder = divmod(span, 7)
    count = full_weeks * _WORKDAYS_PER_WEEK

    first_weekday = start_date.weekday()
    for offset in range(remainder):
        if (first_weekday + offset) % 7 not in _WEEKEND:
            count += 1

    return count
