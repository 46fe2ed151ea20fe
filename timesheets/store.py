# File: timesheets/store.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19
"""
EntryStore: one employee-month of entries, with an unsaved overlay on top.

Persisted entries come from the repository; edits go into a PendingChanges
value (date → Entry, or None for a delete) until commit_draft() writes them
as one batch. Callers that keep drafts between requests hand the overlay back
in through load(..., pending=...).
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from . import domain
from .choices import EntryType, is_leave
from .exceptions import StateConflictError, TimesheetError, ValidationError
from .repository import TimesheetRepository
from .validation import check_document_links, entry_errors

logger = logging.getLogger("timesheets")


def month_stats(entries: Iterable[domain.Entry]) -> domain.MonthStats:
    entries = list(entries)
    working = [e for e in entries if e.entry_type == EntryType.WORKING_HOURS]
    return domain.MonthStats(
        total_entries=len(entries),
        working_days=len(working),
        total_minutes=sum(e.working_minutes for e in working),
        leave_days=sum(1 for e in entries if is_leave(e.entry_type)),
    )


class EntryStore:

    def __init__(self, repository: TimesheetRepository, *, today: Optional[date] = None):
        self.repository = repository
        self._today = today
        self.timesheet: Optional[domain.Timesheet] = None
        self.pending = domain.PendingChanges()

    # ---- state

    @property
    def today(self) -> date:
        return self._today or timezone.localdate()

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self.pending)

    def _loaded(self) -> domain.Timesheet:
        if self.timesheet is None:
            raise TimesheetError("No timesheet loaded; call load() first.")
        return self.timesheet

    def _check_writable(self) -> None:
        ts = self._loaded()
        if not ts.is_editable:
            raise StateConflictError(
                f"Timesheet {ts.year}-{ts.month:02d} is {ts.status} and can no longer be edited.",
                status=ts.status,
            )

    def _check_in_month(self, day: date) -> None:
        ts = self._loaded()
        if not ts.contains(day):
            raise ValidationError(
                {day.isoformat(): [str(_("Date is outside {y}-{m:02d}.").format(y=ts.year, m=ts.month))]}
            )

    # ---- reads

    def load(
        self, employee_id: int, year: int, month: int, *, pending: Optional[domain.PendingChanges] = None
    ) -> domain.Timesheet:
        """Fetch the month; any overlay not passed back in is dropped."""
        self.timesheet = self.repository.load_month(employee_id, year, month)
        self.pending = pending if pending is not None else domain.PendingChanges()
        return self.timesheet

    def reload(self) -> domain.Timesheet:
        ts = self._loaded()
        return self.load(ts.employee_id, ts.year, ts.month)

    def get_effective(self) -> dict[date, domain.Entry]:
        return self.pending.merged(self._loaded().entries)

    def get(self, day: date) -> Optional[domain.Entry]:
        return self.get_effective().get(day)

    def stats(self) -> domain.MonthStats:
        return month_stats(self.get_effective().values())

    # ---- overlay writes

    def save_entry(self, entry: domain.Entry) -> domain.Entry:
        self._check_writable()
        self._check_in_month(entry.date)
        errors = entry_errors(entry, today=self.today)
        if errors:
            raise ValidationError(errors)
        self.pending.put(entry)
        return entry

    def save_bulk(self, entries: Iterable[domain.Entry]) -> list[domain.Entry]:
        """All or nothing: one invalid entry keeps the whole batch out of the overlay."""
        self._check_writable()
        entries = list(entries)
        ts = self._loaded()
        errors: dict[str, list[str]] = {}
        for e in entries:
            if not ts.contains(e.date):
                errors.setdefault(e.date.isoformat(), []).append(str(_("Date is outside the loaded month.")))
                continue
            for msgs in entry_errors(e, today=self.today).values():
                errors.setdefault(e.date.isoformat(), []).extend(msgs)
        if errors:
            raise ValidationError(errors)
        for e in entries:
            self.pending.put(e)
        return entries

    def delete_entry(self, day: date) -> None:
        self._check_writable()
        self._check_in_month(day)
        if day in self._loaded().entries:
            self.pending.remove(day)
        else:
            # only ever existed in the overlay
            self.pending.changes.pop(day, None)

    def discard(self) -> None:
        if self.pending:
            logger.info(f"Discarded {len(self.pending)} unsaved change(s) for {self._loaded()}")
        self.pending.clear()

    # ---- commit

    def _audit(self, reason: Optional[str]) -> Optional[domain.AuditStamp]:
        return None

    def commit_draft(self, reason: Optional[str] = None) -> domain.Timesheet:
        ts = self._loaded()
        if not self.pending:
            logger.info(f"Nothing to commit for {ts}")
            return ts
        self._check_writable()
        check_document_links(self.get_effective())

        audit = self._audit(reason)
        saves, deletes = self.pending.saves, self.pending.deletes
        self.timesheet = self.repository.apply(ts, saves, deletes, audit=audit)
        self.pending = domain.PendingChanges()
        logger.info(
            f"Committed {len(saves)} save(s) and {len(deletes)} delete(s) for {self.timesheet}"
        )
        return self.timesheet
