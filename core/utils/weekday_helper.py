# core/utils/weekday_helper.py
"""Weekday arithmetic shared by the timesheet rules (Mon–Fri working week)."""
from __future__ import annotations

from datetime import date, timedelta
from typing import Collection, Iterable, Iterator, Set

WORKING_WEEK: Set[int] = {0, 1, 2, 3, 4}


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the next one (half-open range)."""
    first = date(year, month, 1)
    return first, (date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1))


def weekdays_between(start: date, end: date, *, weekday_mask: Iterable[int] = WORKING_WEEK) -> int:
    """
    Number of days in [start, end) whose weekday() is in `weekday_mask`.

        >>> weekdays_between(date(2025, 10, 20), date(2025, 10, 25))   # Mon..Fri
        5
        >>> weekdays_between(date(2025, 10, 25), date(2025, 10, 27))   # Sat, Sun
        0
    """
    mask = {int(d) for d in weekday_mask}
    if not mask <= set(range(7)):
        raise ValueError("weekday_mask must contain integers 0..6")
    span = (end - start).days
    if span <= 0:
        return 0
    weeks, rest = divmod(span, 7)
    first_wd = start.weekday()
    return weeks * len(mask) + sum(1 for i in range(rest) if (first_wd + i) % 7 in mask)


def iter_working_dates(start: date, end: date, holidays: Collection[date] = ()) -> Iterator[date]:
    """Mon–Fri dates in [start, end) that are not holidays."""
    day = start
    while day < end:
        if day.weekday() in WORKING_WEEK and day not in holidays:
            yield day
        day += timedelta(days=1)


def working_days_between(start: date, end: date, holidays: Collection[date] = ()) -> int:
    weekday_holidays = sum(1 for h in set(holidays) if start <= h < end and h.weekday() in WORKING_WEEK)
    return weekdays_between(start, end) - weekday_holidays
