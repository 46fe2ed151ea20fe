# timesheets/admin_edit.py
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from django.core.exceptions import PermissionDenied
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from . import domain
from .exceptions import ValidationError
from .identity import Actor
from .repository import TimesheetRepository
from .store import EntryStore

logger = logging.getLogger("timeflow.admin")


class AdminAuditOverlay(EntryStore):
    """
    EntryStore for privileged correction of any timesheet, whatever its status.

    Same save/bulk/delete semantics as the employee's store, but every commit
    needs a reason and leaves an audit stamp (edited_by/at/reason) on the
    sheet plus one AdminEditRecord row. The sheet's workflow status and
    version are left alone.
    """

    def __init__(
        self,
        repository: TimesheetRepository,
        editor: Actor,
        *,
        today: Optional[date] = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        if not editor.is_timesheets_manager:
            logger.warning(f"Person #{editor.id} denied admin timesheet edit")
            raise PermissionDenied(_("Only timesheet managers may correct timesheets."))
        super().__init__(repository, today=today)
        self.editor = editor
        self.clock = clock

    def _check_writable(self) -> None:
        # submitted/approved sheets are not frozen for admins
        self._loaded()

    def _audit(self, reason: Optional[str]) -> domain.AuditStamp:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError({"edit_reason": [str(_("Please give a reason for this edit."))]})
        return domain.AuditStamp(edited_by=self.editor.id, edited_at=self.clock(), edit_reason=reason)

    def commit_draft(self, reason: Optional[str] = None) -> domain.Timesheet:
        # the reason is checked even when there is nothing to write
        self._audit(reason)
        before = len(self.pending)
        ts = super().commit_draft(reason)
        if before:
            logger.info(f"Admin edit on {ts} by #{self.editor.id}: {before} change(s), reason: {reason.strip()}")
        return ts
