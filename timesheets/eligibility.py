# timesheets/eligibility.py
"""
Which months can still be edited and handed in.

  - the current month always
  - the previous month while today.day <= PRIOR_MONTH_CUTOFF_DAY and it is
    not yet submitted/approved
  - nothing older

Submitting also needs COMPLETION_PERCENT of the month's working days to
carry an entry. Working days are Mon-Fri minus whatever the holiday lookup
returns. ApprovalWorkflow defaults to the active HolidayCalendar, so public
holidays drop out of the denominator; pass holidays=no_holidays for a plain
Mon-Fri count.
"""
from __future__ import annotations

from datetime import date
from typing import Callable, Collection, Mapping, Optional

from core.utils.weekday_helper import iter_working_dates, month_bounds, working_days_between

from . import conf
from .choices import TimesheetStatus, SUBMITTED_STATUSES, EDITABLE_STATUSES
from .domain import Period, Timesheet, previous_period
from .exceptions import EligibilityError, StateConflictError

HolidayLookup = Callable[[int, int], Collection[date]]


def no_holidays(year: int, month: int) -> frozenset[date]:
    return frozenset()


def working_days(year: int, month: int, holidays: Collection[date] = ()) -> list[date]:
    return list(iter_working_dates(*month_bounds(year, month), holidays))


def working_day_count(year: int, month: int, holidays: Collection[date] = ()) -> int:
    return working_days_between(*month_bounds(year, month), holidays)


def completion(timesheet: Timesheet, holidays: Collection[date] = ()) -> tuple[int, int, int]:
    """(working days with an entry, working days, percent rounded down)."""
    days = working_days(timesheet.year, timesheet.month, holidays)
    total = working_day_count(timesheet.year, timesheet.month, holidays)
    done = sum(1 for d in days if d in timesheet.entries)
    percent = (done * 100 // total) if total else 100
    return done, total, percent


def meets_threshold(timesheet: Timesheet, holidays: Collection[date] = ()) -> bool:
    done, total, _pct = completion(timesheet, holidays)
    # integer comparison so 79.x% never rounds up to the threshold
    return done * 100 >= conf.completion_percent() * total


def is_period_eligible(year: int, month: int, today: date, status: Optional[str] = None) -> bool:
    if (year, month) == (today.year, today.month):
        return True
    if (year, month) == previous_period(today.year, today.month):
        return today.day <= conf.prior_month_cutoff_day() and status not in SUBMITTED_STATUSES
    return False


def available_periods(today: date, statuses: Optional[Mapping[tuple[int, int], str]] = None) -> list[Period]:
    """Editable periods, current month first. `statuses` maps (year, month) → stored status."""
    statuses = statuses or {}
    current = (today.year, today.month)
    out = [Period(*current, is_current_month=True, is_submitted=statuses.get(current) in SUBMITTED_STATUSES)]
    prev = previous_period(*current)
    if is_period_eligible(*prev, today, statuses.get(prev)):
        out.append(Period(*prev, is_current_month=False, is_submitted=False))
    return out


def check_submission(timesheet: Timesheet, today: date, holidays: Collection[date] = ()) -> None:
    """Raise the specific reason a timesheet cannot be submitted today; return None if it can."""
    if timesheet.status not in EDITABLE_STATUSES:
        raise StateConflictError(
            f"Timesheet is {timesheet.status}; only draft or rejected timesheets can be submitted.",
            status=timesheet.status,
        )
    if not is_period_eligible(timesheet.year, timesheet.month, today, timesheet.status):
        raise EligibilityError(
            f"{timesheet.year}-{timesheet.month:02d} is outside the submission window.",
            condition="window",
        )
    if not meets_threshold(timesheet, holidays):
        done, total, pct = completion(timesheet, holidays)
        raise EligibilityError(
            f"Only {done} of {total} working days ({pct}%) have entries; "
            f"{conf.completion_percent()}% are required.",
            condition="completeness",
        )


def can_submit(timesheet: Timesheet, today: date, holidays: Collection[date] = ()) -> bool:
    return (
        timesheet.status in EDITABLE_STATUSES
        and is_period_eligible(timesheet.year, timesheet.month, today, timesheet.status)
        and meets_threshold(timesheet, holidays)
    )


def can_resubmit(timesheet: Timesheet, today: date, holidays: Collection[date] = ()) -> bool:
    return timesheet.status == TimesheetStatus.REJECTED and can_submit(timesheet, today, holidays)
