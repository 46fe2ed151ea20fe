# File: timesheets/domain.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19
"""
Plain value objects the engine works on.

The ORM models in timesheets/models.py are only the persistence form; the
store, bulk editor, eligibility rules and workflow all operate on these
dataclasses so they run the same against the database or the in-memory fake.
"""
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import date, datetime, time, timedelta
from typing import Iterable, Mapping, Optional

from .choices import TimesheetStatus, EDITABLE_STATUSES, requires_documents, is_half_day


# ------------------------------
# helpers
# ------------------------------

def previous_period(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


def _d(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _t(value) -> Optional[time]:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value))


def shift_minutes(start: time, end: time) -> int:
    """Length of a shift in minutes; end at/before start means it ends next day."""
    s = datetime.combine(date.min, start)
    e = datetime.combine(date.min, end)
    if e <= s:
        e += timedelta(days=1)
    return int((e - s).total_seconds() // 60)


# ------------------------------
# entries
# ------------------------------

@dataclass(frozen=True)
class SupportingDocument:
    """Metadata of an uploaded file; the bytes live in the document store."""
    name: str
    size: int = 0
    mime_type: str = ""
    id: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping) -> "SupportingDocument":
        return cls(
            name=data["name"],
            size=int(data.get("size") or 0),
            mime_type=data.get("mime_type") or data.get("mimeType") or "",
            id=str(data.get("id") or ""),
        )


@dataclass(frozen=True)
class Entry:
    date: date
    entry_type: str
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    half_day_period: Optional[str] = None
    date_earned: Optional[date] = None
    notes: str = ""
    supporting_documents: tuple[SupportingDocument, ...] = ()
    document_reference: Optional[date] = None
    is_primary_document: bool = False

    def __post_init__(self):
        # accept lists from callers, keep the value hashable
        if not isinstance(self.supporting_documents, tuple):
            object.__setattr__(self, "supporting_documents", tuple(self.supporting_documents))

    @property
    def requires_documents(self) -> bool:
        return requires_documents(self.entry_type)

    @property
    def is_half_day(self) -> bool:
        return is_half_day(self.entry_type)

    @property
    def has_documents(self) -> bool:
        return bool(self.supporting_documents)

    @property
    def working_minutes(self) -> int:
        if not (self.start_time and self.end_time):
            return 0
        return shift_minutes(self.start_time, self.end_time)

    @property
    def is_overnight(self) -> bool:
        return bool(self.start_time and self.end_time and self.end_time <= self.start_time)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "entry_type": self.entry_type,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "half_day_period": self.half_day_period,
            "date_earned": self.date_earned.isoformat() if self.date_earned else None,
            "notes": self.notes,
            "supporting_documents": [d.to_dict() for d in self.supporting_documents],
            "document_reference": self.document_reference.isoformat() if self.document_reference else None,
            "is_primary_document": self.is_primary_document,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Entry":
        return cls(
            date=_d(data["date"]),
            entry_type=data["entry_type"],
            start_time=_t(data.get("start_time")),
            end_time=_t(data.get("end_time")),
            half_day_period=data.get("half_day_period") or None,
            date_earned=_d(data.get("date_earned")),
            notes=data.get("notes") or "",
            supporting_documents=tuple(
                SupportingDocument.from_dict(d) for d in (data.get("supporting_documents") or [])
            ),
            document_reference=_d(data.get("document_reference")),
            is_primary_document=bool(data.get("is_primary_document")),
        )


# ------------------------------
# monthly container
# ------------------------------

@dataclass
class Timesheet:
    employee_id: int
    year: int
    month: int
    status: str = TimesheetStatus.DRAFT
    version: int = 1
    entries: dict[date, Entry] = field(default_factory=dict)
    supervisor_id: Optional[int] = None

    submitted_at: Optional[datetime] = None
    approved_by: Optional[int] = None
    approved_by_name: str = ""
    approved_on_behalf_of: Optional[int] = None
    approved_at: Optional[datetime] = None
    approval_comments: str = ""

    # admin audit stamp
    edited_by: Optional[int] = None
    edited_at: Optional[datetime] = None
    edit_reason: str = ""

    pk: Optional[int] = None

    def __str__(self) -> str:
        return f"#{self.employee_id} — {self.year}-{self.month:02d} ({self.status}, v{self.version})"

    @property
    def period(self) -> tuple[int, int]:
        return self.year, self.month

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month


@dataclass(frozen=True)
class AuditStamp:
    edited_by: int
    edited_at: datetime
    edit_reason: str


@dataclass(frozen=True)
class ApprovalRecord:
    timesheet_id: Optional[int]
    action: str
    acting_identity: int
    acting_on_behalf_of: Optional[int]
    comments: str
    timestamp: datetime
    version: int = 1


@dataclass(frozen=True)
class Period:
    year: int
    month: int
    is_current_month: bool
    is_submitted: bool


# ------------------------------
# draft overlay
# ------------------------------

@dataclass
class PendingChanges:
    """
    Unsaved edits for one employee-month: date → Entry, or None for a delete.

    Serializable so a session (or any caller) can keep it between requests
    and hand it back to the EntryStore.
    """
    changes: dict[date, Optional[Entry]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def put(self, entry: Entry) -> None:
        self.changes[entry.date] = entry

    def remove(self, day: date) -> None:
        self.changes[day] = None

    def clear(self) -> None:
        self.changes.clear()

    @property
    def saves(self) -> list[Entry]:
        return [e for _day, e in sorted(self.changes.items()) if e is not None]

    @property
    def deletes(self) -> list[date]:
        return sorted(d for d, e in self.changes.items() if e is None)

    def merged(self, persisted: Mapping[date, Entry]) -> dict[date, Entry]:
        merged = dict(persisted)
        for day, entry in self.changes.items():
            if entry is None:
                merged.pop(day, None)
            else:
                merged[day] = entry
        return dict(sorted(merged.items()))

    def to_dict(self) -> dict:
        return {
            day.isoformat(): (entry.to_dict() if entry is not None else None)
            for day, entry in sorted(self.changes.items())
        }

    @classmethod
    def from_dict(cls, data: Mapping | None) -> "PendingChanges":
        out = cls()
        for key, value in (data or {}).items():
            day = date.fromisoformat(key)
            out.changes[day] = Entry.from_dict(value) if value is not None else None
        return out

    @classmethod
    def of(cls, entries: Iterable[Entry]) -> "PendingChanges":
        out = cls()
        for e in entries:
            out.put(e)
        return out


# ------------------------------
# statistics
# ------------------------------

@dataclass(frozen=True)
class MonthStats:
    total_entries: int
    working_days: int
    total_minutes: int
    leave_days: int

    @property
    def total_hours(self) -> float:
        return round(self.total_minutes / 60, 2)
