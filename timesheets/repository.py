# File: timesheets/repository.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19
"""
Persistence port for the timesheet engine.

`DjangoTimesheetRepository` is the production implementation on the ORM;
`InMemoryTimesheetRepository` honours the same contract for tests and
headless runs. Failures surface as exceptions from timesheets.exceptions.
"""
from __future__ import annotations

import abc
import copy
import itertools
from datetime import date
from typing import Iterable, Optional, Sequence

from django.db import transaction

from . import domain
from .choices import TimesheetStatus, EDITABLE_STATUSES
from .exceptions import StateConflictError


class TimesheetRepository(abc.ABC):

    @abc.abstractmethod
    def load_month(self, employee_id: int, year: int, month: int) -> domain.Timesheet:
        """The stored sheet, or a fresh unsaved draft (pk=None) if there is none."""

    @abc.abstractmethod
    def apply(
        self,
        timesheet: domain.Timesheet,
        saves: Sequence[domain.Entry],
        deletes: Sequence[date],
        *,
        audit: Optional[domain.AuditStamp] = None,
    ) -> domain.Timesheet:
        """Write saves and deletes as one batch; creates the sheet if needed."""

    @abc.abstractmethod
    def submit(self, timesheet: domain.Timesheet) -> domain.Timesheet:
        """Persist a draft/rejected → submitted transition."""

    @abc.abstractmethod
    def decide(self, timesheet: domain.Timesheet, record: domain.ApprovalRecord) -> domain.Timesheet:
        """Persist a submitted → approved/rejected transition together with its record."""

    @abc.abstractmethod
    def statuses(self, employee_id: int, periods: Iterable[tuple[int, int]]) -> dict[tuple[int, int], str]:
        """Status per (year, month) for the periods that have a stored sheet."""

    @abc.abstractmethod
    def history(self, employee_id: int) -> list[domain.Timesheet]:
        """All stored sheets of the employee, newest period first."""

    @abc.abstractmethod
    def records(self, timesheet: domain.Timesheet) -> list[domain.ApprovalRecord]:
        """Approval records of the sheet, oldest first."""

    @abc.abstractmethod
    def submitted_for(self, supervisor_ids: Iterable[int]) -> list[domain.Timesheet]:
        """Submitted sheets of employees reporting to any of the supervisors."""

    # single-item conveniences over apply()
    def save_entry(self, timesheet: domain.Timesheet, entry: domain.Entry) -> domain.Timesheet:
        return self.apply(timesheet, [entry], [])

    def save_bulk(self, timesheet: domain.Timesheet, entries: Iterable[domain.Entry]) -> domain.Timesheet:
        return self.apply(timesheet, list(entries), [])

    def delete_entry(self, timesheet: domain.Timesheet, day: date) -> domain.Timesheet:
        return self.apply(timesheet, [], [day])


def _state_fields(src: domain.Timesheet, dst: domain.Timesheet) -> None:
    for name in (
        "status", "version", "submitted_at", "approved_by", "approved_by_name",
        "approved_on_behalf_of", "approved_at", "approval_comments",
    ):
        setattr(dst, name, getattr(src, name))


# ------------------------------
# In-memory
# ------------------------------

class InMemoryTimesheetRepository(TimesheetRepository):
    """
    Dict-backed fake. `supervisors` maps employee id → supervisor person id,
    the same lookup the ORM version does through Employee.supervisor.
    """

    def __init__(self, supervisors: Optional[dict[int, int]] = None):
        self.supervisors: dict[int, int] = dict(supervisors or {})
        self._sheets: dict[tuple[int, int, int], domain.Timesheet] = {}
        self._records: list[domain.ApprovalRecord] = []
        self.admin_edits: list[tuple[int, domain.AuditStamp, list[str], list[str]]] = []
        self._ids = itertools.count(1)

    def _key(self, ts: domain.Timesheet) -> tuple[int, int, int]:
        return ts.employee_id, ts.year, ts.month

    def _stored(self, ts: domain.Timesheet) -> domain.Timesheet:
        try:
            return self._sheets[self._key(ts)]
        except KeyError:
            raise StateConflictError(f"Timesheet {ts} has not been saved yet.", status=ts.status)

    def put(self, ts: domain.Timesheet) -> domain.Timesheet:
        """Seed a sheet directly (tests)."""
        ts = copy.deepcopy(ts)
        if ts.pk is None:
            ts.pk = next(self._ids)
        self._sheets[self._key(ts)] = ts
        return copy.deepcopy(ts)

    def load_month(self, employee_id, year, month):
        stored = self._sheets.get((employee_id, year, month))
        if stored is None:
            return domain.Timesheet(employee_id, year, month, supervisor_id=self.supervisors.get(employee_id))
        ts = copy.deepcopy(stored)
        ts.supervisor_id = self.supervisors.get(employee_id)
        return ts

    def apply(self, timesheet, saves, deletes, *, audit=None):
        current = self._sheets.get(self._key(timesheet))
        new = copy.deepcopy(current) if current else domain.Timesheet(
            timesheet.employee_id, timesheet.year, timesheet.month, pk=next(self._ids)
        )
        for day in deletes:
            new.entries.pop(day, None)
        for e in saves:
            new.entries[e.date] = e
        new.entries = dict(sorted(new.entries.items()))
        if audit is not None:
            new.edited_by, new.edited_at, new.edit_reason = audit.edited_by, audit.edited_at, audit.edit_reason
            self.admin_edits.append((
                new.pk, audit,
                [e.date.isoformat() for e in saves],
                [d.isoformat() for d in deletes],
            ))
        self._sheets[self._key(new)] = new
        return self.load_month(new.employee_id, new.year, new.month)

    def submit(self, timesheet):
        stored = self._stored(timesheet)
        if stored.status not in EDITABLE_STATUSES:
            raise StateConflictError(f"Timesheet is {stored.status}; cannot submit.", status=stored.status)
        _state_fields(timesheet, stored)
        return self.load_month(timesheet.employee_id, timesheet.year, timesheet.month)

    def decide(self, timesheet, record):
        stored = self._stored(timesheet)
        if stored.status != TimesheetStatus.SUBMITTED:
            raise StateConflictError(f"Timesheet is {stored.status}; nothing to decide.", status=stored.status)
        _state_fields(timesheet, stored)
        self._records.append(record)
        return self.load_month(timesheet.employee_id, timesheet.year, timesheet.month)

    def statuses(self, employee_id, periods):
        out = {}
        for y, m in periods:
            ts = self._sheets.get((employee_id, y, m))
            if ts is not None:
                out[(y, m)] = ts.status
        return out

    def history(self, employee_id):
        rows = [ts for (emp, _y, _m), ts in self._sheets.items() if emp == employee_id]
        rows.sort(key=lambda t: (t.year, t.month), reverse=True)
        return [self.load_month(t.employee_id, t.year, t.month) for t in rows]

    def records(self, timesheet):
        return [r for r in self._records if r.timesheet_id == timesheet.pk]

    def submitted_for(self, supervisor_ids):
        wanted = set(supervisor_ids)
        out = [
            self.load_month(emp, y, m)
            for (emp, y, m), ts in sorted(self._sheets.items())
            if ts.status == TimesheetStatus.SUBMITTED and self.supervisors.get(emp) in wanted
        ]
        return out


# ------------------------------
# Django ORM
# ------------------------------

class DjangoTimesheetRepository(TimesheetRepository):

    def _row(self, employee_id, year, month, *, lock: bool = False):
        from .models import MonthlyTimesheet
        qs = MonthlyTimesheet.objects.filter(employee_id=employee_id, year=year, month=month)
        if lock:
            qs = qs.select_for_update()
        return qs.select_related("employee").first()

    def load_month(self, employee_id, year, month):
        from employees.models import Employee
        row = self._row(employee_id, year, month)
        if row is not None:
            return row.to_domain()
        supervisor_id = Employee.objects.filter(pk=employee_id).values_list("supervisor_id", flat=True).first()
        return domain.Timesheet(employee_id, year, month, supervisor_id=supervisor_id)

    def apply(self, timesheet, saves, deletes, *, audit=None):
        from .models import MonthlyTimesheet, TimesheetEntry, AdminEditRecord

        with transaction.atomic():
            row = self._row(timesheet.employee_id, timesheet.year, timesheet.month, lock=True)
            if row is None:
                row = MonthlyTimesheet.objects.create(
                    employee_id=timesheet.employee_id, year=timesheet.year, month=timesheet.month,
                )
            if deletes:
                row.entries.filter(date__in=list(deletes)).delete()
            for e in saves:
                TimesheetEntry.objects.update_or_create(
                    timesheet=row, date=e.date, defaults=TimesheetEntry.fields_from_domain(e),
                )
            if audit is not None:
                row.edited_by_id = audit.edited_by
                row.edited_at = audit.edited_at
                row.edit_reason = audit.edit_reason
                AdminEditRecord.objects.create(
                    timesheet=row,
                    edited_by_id=audit.edited_by,
                    edited_at=audit.edited_at,
                    edit_reason=audit.edit_reason,
                    saved_dates=[e.date.isoformat() for e in saves],
                    deleted_dates=[d.isoformat() for d in deletes],
                )
            # touch the row so updated_at / history / lock_version follow entry writes
            row.save()
        return self.load_month(timesheet.employee_id, timesheet.year, timesheet.month)

    def submit(self, timesheet):
        with transaction.atomic():
            row = self._row(timesheet.employee_id, timesheet.year, timesheet.month, lock=True)
            if row is None:
                raise StateConflictError(f"Timesheet {timesheet} has not been saved yet.", status=timesheet.status)
            if row.status not in EDITABLE_STATUSES:
                raise StateConflictError(f"Timesheet is {row.status}; cannot submit.", status=row.status)
            row.copy_state(timesheet)
            row.save()
        return self.load_month(timesheet.employee_id, timesheet.year, timesheet.month)

    def decide(self, timesheet, record):
        from .models import ApprovalRecord

        with transaction.atomic():
            row = self._row(timesheet.employee_id, timesheet.year, timesheet.month, lock=True)
            if row is None or row.status != TimesheetStatus.SUBMITTED:
                status = row.status if row is not None else timesheet.status
                raise StateConflictError(f"Timesheet is {status}; nothing to decide.", status=status)
            row.copy_state(timesheet)
            row.save()
            ApprovalRecord.objects.create(
                timesheet=row,
                action=record.action,
                acting_identity_id=record.acting_identity,
                acting_on_behalf_of_id=record.acting_on_behalf_of,
                comments=record.comments,
                version=record.version,
                timestamp=record.timestamp,
            )
        return self.load_month(timesheet.employee_id, timesheet.year, timesheet.month)

    def statuses(self, employee_id, periods):
        from django.db.models import Q
        from .models import MonthlyTimesheet
        periods = list(periods)
        if not periods:
            return {}
        q = Q()
        for y, m in periods:
            q |= Q(year=y, month=m)
        rows = MonthlyTimesheet.objects.filter(q, employee_id=employee_id).values_list("year", "month", "status")
        return {(y, m): status for y, m, status in rows}

    def history(self, employee_id):
        from .models import MonthlyTimesheet
        rows = (
            MonthlyTimesheet.objects
            .filter(employee_id=employee_id)
            .select_related("employee")
            .prefetch_related("entries")
            .order_by("-year", "-month")
        )
        return [r.to_domain() for r in rows]

    def records(self, timesheet):
        from .models import ApprovalRecord
        if timesheet.pk is None:
            return []
        return [r.to_domain() for r in ApprovalRecord.objects.filter(timesheet_id=timesheet.pk)]

    def submitted_for(self, supervisor_ids):
        from .models import MonthlyTimesheet
        rows = (
            MonthlyTimesheet.objects
            .filter(status=TimesheetStatus.SUBMITTED, employee__supervisor_id__in=list(supervisor_ids))
            .select_related("employee")
            .prefetch_related("entries")
            .order_by("submitted_at", "id")
        )
        return [r.to_domain() for r in rows]
