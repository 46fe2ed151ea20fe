"""Small builders shared by the timesheet tests."""
from datetime import date, time, timedelta

from timesheets.choices import EntryType
from timesheets.domain import Entry, SupportingDocument, Timesheet

# four weekday holidays at the end of July 2025 → 23 - 4 = 19 working days
JULY_2025_HOLIDAYS = frozenset({date(2025, 7, 28), date(2025, 7, 29), date(2025, 7, 30), date(2025, 7, 31)})


def july_holidays(year, month):
    return JULY_2025_HOLIDAYS if (year, month) == (2025, 7) else frozenset()


def doc(name="mc.pdf", size=1024):
    return SupportingDocument(name=name, size=size, mime_type="application/pdf", id=f"docs/{name}")


def working(day, start="09:00", end="18:00", notes=""):
    return Entry(
        date=day,
        entry_type=EntryType.WORKING_HOURS,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
        notes=notes,
    )


def weekdays(year, month, holidays=frozenset()):
    d = date(year, month, 1)
    out = []
    while d.month == month:
        if d.weekday() < 5 and d not in holidays:
            out.append(d)
        d += timedelta(days=1)
    return out


def sheet(employee_id, year, month, days=(), **kwargs):
    return Timesheet(employee_id, year, month, entries={d: working(d) for d in days}, **kwargs)
