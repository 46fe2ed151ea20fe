# File: timesheets/models.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from simple_history.models import HistoricalRecords
from concurrency.fields import AutoIncVersionField

from employees.models import Employee
from people.models import Person

from . import domain
from .choices import EntryType, HalfDayPeriod, TimesheetStatus, Decision


# ------------------------------
# Timesheets
# ------------------------------

class MonthlyTimesheet(models.Model):
    """
    One sheet per employee per (year, month), created on the first entry write.

    `version` counts resubmissions after a rejection; `lock_version` is the
    row-level optimistic lock and has nothing to do with the workflow.
    """
    employee = models.ForeignKey(
        Employee, on_delete=models.PROTECT, related_name="timesheets", verbose_name=_("Employee")
    )
    year = models.PositiveIntegerField(_("Year"), validators=[MinValueValidator(2000), MaxValueValidator(9999)])
    month = models.PositiveSmallIntegerField(_("Month"), validators=[MinValueValidator(1), MaxValueValidator(12)])

    status = models.CharField(_("Status"), max_length=12, choices=TimesheetStatus.choices, default=TimesheetStatus.DRAFT, db_index=True)
    version = models.PositiveIntegerField(_("Version"), default=1, help_text=_("Increments on every resubmission after a rejection."))

    submitted_at = models.DateTimeField(_("Submitted at"), null=True, blank=True)

    # decision (approved_by is who acted; approved_on_behalf_of the supervisor they stood in for)
    approved_by = models.ForeignKey(
        Person, on_delete=models.PROTECT, null=True, blank=True, related_name="+", verbose_name=_("Decided by")
    )
    approved_by_name = models.CharField(_("Decided by (name)"), max_length=160, blank=True)
    approved_on_behalf_of = models.ForeignKey(
        Person, on_delete=models.PROTECT, null=True, blank=True, related_name="+", verbose_name=_("On behalf of")
    )
    approved_at = models.DateTimeField(_("Decided at"), null=True, blank=True)
    approval_comments = models.TextField(_("Approval comments"), blank=True)

    # admin audit stamp (out-of-band corrections)
    edited_by = models.ForeignKey(
        Person, on_delete=models.PROTECT, null=True, blank=True, related_name="+", verbose_name=_("Last admin edit by")
    )
    edited_at = models.DateTimeField(_("Last admin edit at"), null=True, blank=True)
    edit_reason = models.TextField(_("Last admin edit reason"), blank=True)

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    history = HistoricalRecords()
    lock_version = AutoIncVersionField()

    class Meta:
        verbose_name = _("Timesheet")
        verbose_name_plural = _("Timesheets")
        unique_together = (("employee", "year", "month"),)
        ordering = ("-year", "-month", "-id")
        indexes = [
            models.Index(fields=["employee", "year", "month"]),
            models.Index(fields=["status"]),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(month__gte=1, month__lte=12),
                name="ck_timesheet_month_range",
            ),
            models.CheckConstraint(
                check=models.Q(version__gte=1),
                name="ck_timesheet_version_positive",
            ),
            models.CheckConstraint(
                check=~models.Q(status=TimesheetStatus.REJECTED) | ~models.Q(approval_comments=""),
                name="ck_timesheet_rejected_has_comments",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.employee} — {self.year}-{self.month:02d}"

    def clean(self):
        errors = {}
        if self.status == TimesheetStatus.REJECTED and not (self.approval_comments or "").strip():
            errors["approval_comments"] = _("A rejected timesheet needs comments.")
        if errors:
            raise ValidationError(errors)

    def to_domain(self, *, supervisor_id: int | None = None) -> domain.Timesheet:
        return domain.Timesheet(
            employee_id=self.employee_id,
            year=self.year,
            month=self.month,
            status=self.status,
            version=self.version,
            entries={e.date: e.to_domain() for e in self.entries.all()},
            supervisor_id=supervisor_id if supervisor_id is not None else self.employee.supervisor_id,
            submitted_at=self.submitted_at,
            approved_by=self.approved_by_id,
            approved_by_name=self.approved_by_name,
            approved_on_behalf_of=self.approved_on_behalf_of_id,
            approved_at=self.approved_at,
            approval_comments=self.approval_comments,
            edited_by=self.edited_by_id,
            edited_at=self.edited_at,
            edit_reason=self.edit_reason,
            pk=self.pk,
        )

    def copy_state(self, ts: domain.Timesheet) -> None:
        """Workflow fields from the domain object onto the row (entries excluded)."""
        self.status = ts.status
        self.version = ts.version
        self.submitted_at = ts.submitted_at
        self.approved_by_id = ts.approved_by
        self.approved_by_name = ts.approved_by_name or ""
        self.approved_on_behalf_of_id = ts.approved_on_behalf_of
        self.approved_at = ts.approved_at
        self.approval_comments = ts.approval_comments or ""


class TimesheetEntry(models.Model):
    timesheet = models.ForeignKey(
        MonthlyTimesheet, on_delete=models.CASCADE, related_name="entries", verbose_name=_("Timesheet")
    )
    date = models.DateField(_("Date"))
    entry_type = models.CharField(_("Type"), max_length=32, choices=EntryType.choices)

    start_time = models.TimeField(_("Start"), null=True, blank=True)
    end_time   = models.TimeField(_("End"),   null=True, blank=True)
    half_day_period = models.CharField(_("Half day"), max_length=2, choices=HalfDayPeriod.choices, blank=True)
    date_earned = models.DateField(_("Date earned"), null=True, blank=True, help_text=_("Off in lieu only."))

    notes = models.TextField(_("Notes"), blank=True)

    # [{id, name, size, mime_type}]; bytes live in the document store
    supporting_documents = models.JSONField(_("Supporting documents"), default=list, blank=True)
    document_reference = models.DateField(_("Documents held on"), null=True, blank=True)
    is_primary_document = models.BooleanField(_("Primary document day"), default=False)

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    history = HistoricalRecords()

    class Meta:
        verbose_name = _("Timesheet entry")
        verbose_name_plural = _("Timesheet entries")
        ordering = ("date",)
        constraints = [
            models.UniqueConstraint(fields=["timesheet", "date"], name="uq_timesheetentry_one_per_day"),
        ]

    def __str__(self) -> str:
        return f"{self.date.isoformat()} — {self.get_entry_type_display()}"

    def to_domain(self) -> domain.Entry:
        return domain.Entry(
            date=self.date,
            entry_type=self.entry_type,
            start_time=self.start_time,
            end_time=self.end_time,
            half_day_period=self.half_day_period or None,
            date_earned=self.date_earned,
            notes=self.notes,
            supporting_documents=tuple(
                domain.SupportingDocument.from_dict(d) for d in (self.supporting_documents or [])
            ),
            document_reference=self.document_reference,
            is_primary_document=self.is_primary_document,
        )

    @staticmethod
    def fields_from_domain(entry: domain.Entry) -> dict:
        return {
            "entry_type": entry.entry_type,
            "start_time": entry.start_time,
            "end_time": entry.end_time,
            "half_day_period": entry.half_day_period or "",
            "date_earned": entry.date_earned,
            "notes": entry.notes or "",
            "supporting_documents": [d.to_dict() for d in entry.supporting_documents],
            "document_reference": entry.document_reference,
            "is_primary_document": entry.is_primary_document,
        }


# ------------------------------
# Audit trail
# ------------------------------

class ApprovalRecord(models.Model):
    """Immutable record of an approve/reject decision."""
    timesheet = models.ForeignKey(
        MonthlyTimesheet, on_delete=models.PROTECT, related_name="approval_records", verbose_name=_("Timesheet")
    )
    action = models.CharField(_("Action"), max_length=10, choices=Decision.choices)
    acting_identity = models.ForeignKey(
        Person, on_delete=models.PROTECT, related_name="approvals_made", verbose_name=_("Acting identity")
    )
    acting_on_behalf_of = models.ForeignKey(
        Person, on_delete=models.PROTECT, null=True, blank=True, related_name="approvals_delegated",
        verbose_name=_("On behalf of"),
    )
    comments = models.TextField(_("Comments"), blank=True)
    version = models.PositiveIntegerField(_("Timesheet version"), default=1)
    timestamp = models.DateTimeField(_("Timestamp"), default=timezone.now)

    class Meta:
        verbose_name = _("Approval record")
        verbose_name_plural = _("Approval records")
        ordering = ("timestamp", "id")
        indexes = [
            models.Index(fields=["timesheet", "timestamp"]),
            models.Index(fields=["acting_on_behalf_of", "timestamp"]),
        ]

    def __str__(self) -> str:
        return f"{self.action} {self.timesheet} by {self.acting_identity}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError(_("Approval records are immutable."))
        super().save(*args, **kwargs)

    def to_domain(self) -> domain.ApprovalRecord:
        return domain.ApprovalRecord(
            timesheet_id=self.timesheet_id,
            action=self.action,
            acting_identity=self.acting_identity_id,
            acting_on_behalf_of=self.acting_on_behalf_of_id,
            comments=self.comments,
            timestamp=self.timestamp,
            version=self.version,
        )


class AdminEditRecord(models.Model):
    """One row per privileged commit, next to the stamp on the sheet itself."""
    timesheet = models.ForeignKey(
        MonthlyTimesheet, on_delete=models.PROTECT, related_name="admin_edits", verbose_name=_("Timesheet")
    )
    edited_by = models.ForeignKey(Person, on_delete=models.PROTECT, related_name="+", verbose_name=_("Edited by"))
    edited_at = models.DateTimeField(_("Edited at"))
    edit_reason = models.TextField(_("Reason"))
    saved_dates = models.JSONField(_("Saved dates"), default=list, blank=True)
    deleted_dates = models.JSONField(_("Deleted dates"), default=list, blank=True)

    class Meta:
        verbose_name = _("Admin edit")
        verbose_name_plural = _("Admin edits")
        ordering = ("-edited_at", "-id")
        constraints = [
            models.CheckConstraint(check=~models.Q(edit_reason=""), name="ck_adminedit_reason_nonempty"),
        ]

    def __str__(self) -> str:
        return f"{self.timesheet} — {self.edited_at:%Y-%m-%d %H:%M}"


# ------------------------------
# Working hours presets
# ------------------------------

class WorkingHoursPreset(models.Model):
    """Named start/end pair used to pre-fill working hours. No owner = global."""
    owner = models.ForeignKey(
        Person, on_delete=models.CASCADE, null=True, blank=True, related_name="working_hours_presets",
        verbose_name=_("Owner"),
    )
    name = models.CharField(_("Name"), max_length=80, default="Custom Hours")
    start_time = models.TimeField(_("Start"))
    end_time = models.TimeField(_("End"))
    is_default = models.BooleanField(_("Default"), default=False)

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    history = HistoricalRecords()

    class Meta:
        verbose_name = _("Working hours preset")
        verbose_name_plural = _("Working hours presets")
        ordering = ("-is_default", "start_time", "id")
        constraints = [
            models.UniqueConstraint(
                fields=["owner"],
                condition=models.Q(is_default=True, owner__isnull=False),
                name="uq_preset_single_default_per_owner",
            ),
            models.UniqueConstraint(
                fields=["is_default"],
                condition=models.Q(is_default=True, owner__isnull=True),
                name="uq_preset_single_global_default",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.start_time:%H:%M}–{self.end_time:%H:%M})"
