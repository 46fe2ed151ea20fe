# File: timesheets/workflow.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19
"""
Approval workflow for monthly timesheets.

    draft ──submit──▶ submitted ──decide──▶ approved
                          ▲                   │
                          │                   └──▶ rejected
                          └──── resubmit (version + 1) ◀┘

Every transition works on the committed state re-read from the repository,
never on an editor's unsaved overlay. The repository re-checks the status
under a row lock, so a transition either applies fully (with its approval
record) or not at all.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from django.core.exceptions import PermissionDenied
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from standins.substitution import Approver, DelegationDirectory, resolve_approver

from . import domain
from .choices import Decision, TimesheetStatus
from .eligibility import HolidayLookup, available_periods as eligible_periods, can_submit, check_submission
from .exceptions import DataIntegrityError, StateConflictError, ValidationError
from .identity import Actor
from .repository import TimesheetRepository
from .validation import check_document_links, incomplete_entries

logger = logging.getLogger("timesheets")

_DECISION_STATUS = {
    Decision.APPROVED: TimesheetStatus.APPROVED,
    Decision.REJECTED: TimesheetStatus.REJECTED,
}


def _default_holidays(year: int, month: int):
    from employees.models import active_holidays
    return active_holidays(year, month)


def normalize_decision(value) -> str:
    key = str(value or "").strip().upper()
    if key not in Decision.values:
        raise ValidationError({"decision": [str(_("Decision must be APPROVED or REJECTED."))]})
    return Decision(key)


class ApprovalWorkflow:

    def __init__(
        self,
        repository: TimesheetRepository,
        directory: DelegationDirectory,
        *,
        clock: Callable[[], datetime] = timezone.now,
        holidays: Optional[HolidayLookup] = None,
    ):
        self.repository = repository
        self.directory = directory
        self.clock = clock
        self.holidays = holidays or _default_holidays

    def today(self) -> date:
        now = self.clock()
        return timezone.localdate(now) if timezone.is_aware(now) else now.date()

    def _committed(self, ts: domain.Timesheet) -> domain.Timesheet:
        return self.repository.load_month(ts.employee_id, ts.year, ts.month)

    # ---- submission

    def can_submit(self, timesheet: domain.Timesheet) -> bool:
        ts = self._committed(timesheet)
        return can_submit(ts, self.today(), self.holidays(ts.year, ts.month))

    def submit(self, timesheet: domain.Timesheet) -> domain.Timesheet:
        ts = self._committed(timesheet)
        today = self.today()
        check_submission(ts, today, self.holidays(ts.year, ts.month))

        problems = incomplete_entries(ts.entries.values(), today=today)
        if problems:
            raise ValidationError(problems)
        check_document_links(ts.entries)

        new = replace(ts, status=TimesheetStatus.SUBMITTED, submitted_at=self.clock())
        if ts.status == TimesheetStatus.REJECTED:
            # new cycle: stale decision goes, the comments stay visible until the next decision
            new = replace(
                new,
                version=ts.version + 1,
                approved_by=None,
                approved_by_name="",
                approved_on_behalf_of=None,
                approved_at=None,
            )
        saved = self.repository.submit(new)
        logger.info(f"Timesheet {saved} submitted (was {ts.status})")
        return saved

    # ---- decision

    def _approver_for(self, ts: domain.Timesheet, actor: Actor, today: date) -> Approver:
        if ts.supervisor_id is None:
            raise DataIntegrityError(f"Timesheet {ts} has no supervisor to decide on it.")
        approver = resolve_approver(ts.supervisor_id, today, self.directory)
        if actor.id == approver.acting_id:
            return approver
        if actor.id == ts.supervisor_id:
            # supervisor acting in person while a stand-in is active
            return Approver(acting_id=actor.id, acting_name=actor.name or self.directory.display_name(actor.id))
        logger.warning(f"Person #{actor.id} tried to decide on {ts} without authority")
        raise PermissionDenied(_("You are not allowed to decide on this timesheet."))

    def decide(self, timesheet: domain.Timesheet, decision, comments: str, actor: Actor) -> domain.Timesheet:
        decision = normalize_decision(decision)
        comments = (comments or "").strip()
        ts = self._committed(timesheet)

        if ts.status != TimesheetStatus.SUBMITTED:
            raise StateConflictError(
                f"Timesheet {ts} is {ts.status}; only submitted timesheets can be decided.",
                status=ts.status,
            )
        if decision == Decision.REJECTED and not comments:
            raise ValidationError({"approval_comments": [str(_("Please give a reason for the rejection."))]})

        today = self.today()
        approver = self._approver_for(ts, actor, today)
        now = self.clock()

        new = replace(
            ts,
            status=_DECISION_STATUS[decision],
            approved_by=approver.acting_id,
            approved_by_name=approver.acting_name,
            approved_on_behalf_of=approver.on_behalf_of,
            approved_at=now,
            approval_comments=comments,
        )
        record = domain.ApprovalRecord(
            timesheet_id=ts.pk,
            action=decision,
            acting_identity=approver.acting_id,
            acting_on_behalf_of=approver.on_behalf_of,
            comments=comments,
            timestamp=now,
            version=ts.version,
        )
        saved = self.repository.decide(new, record)
        behalf = f" on behalf of #{approver.on_behalf_of}" if approver.on_behalf_of else ""
        logger.info(f"Timesheet {saved} {decision} by #{approver.acting_id}{behalf}")
        return saved

    # ---- reads

    def available_periods(self, employee_id: int, today: Optional[date] = None) -> list[domain.Period]:
        """Periods the employee may still edit, current month first."""
        today = today or self.today()
        current = (today.year, today.month)
        statuses = self.repository.statuses(employee_id, [current, domain.previous_period(*current)])
        return eligible_periods(today, statuses)

    def approval_queue(self, actor: Actor, today: Optional[date] = None) -> list[domain.Timesheet]:
        """Submitted timesheets the actor may decide on: own reports plus delegated ones."""
        today = today or self.today()
        supervisors = {actor.id} | {d.supervisor_id for d in self.directory.delegating_to(actor.id, today)}
        return self.repository.submitted_for(sorted(supervisors))

    def history(self, employee_id: int) -> list[domain.Timesheet]:
        return self.repository.history(employee_id)

    def records(self, timesheet: domain.Timesheet) -> list[domain.ApprovalRecord]:
        return self.repository.records(timesheet)
