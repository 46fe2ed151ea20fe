# timesheets/conf.py
from __future__ import annotations

from datetime import time

from django.conf import settings

DEFAULTS = {
    # previous month stays open up to and including this day-of-month
    "PRIOR_MONTH_CUTOFF_DAY": 10,
    # share of working days (in percent) that need an entry before submitting
    "COMPLETION_PERCENT": 80,
    "DOCUMENT_UPLOAD_TO": "timesheets/docs/%Y/%m/",
    "DEFAULT_WORKING_HOURS": ("09:00", "18:00"),
}


def get(name: str):
    return (getattr(settings, "TIMESHEETS", None) or {}).get(name, DEFAULTS[name])


def prior_month_cutoff_day() -> int:
    return int(get("PRIOR_MONTH_CUTOFF_DAY"))


def completion_percent() -> int:
    return int(get("COMPLETION_PERCENT"))


def document_upload_to() -> str:
    return str(get("DOCUMENT_UPLOAD_TO"))


def default_working_hours() -> tuple[time, time]:
    start, end = get("DEFAULT_WORKING_HOURS")
    return time.fromisoformat(start), time.fromisoformat(end)
