# timesheets/choices.py
from django.db import models
from django.utils.translation import gettext_lazy as _


class EntryType(models.TextChoices):
    WORKING_HOURS = "working_hours", _("Working Hours")
    ANNUAL_LEAVE = "annual_leave", _("Annual Leave")
    ANNUAL_LEAVE_HALFDAY = "annual_leave_halfday", _("Annual Leave (Half Day)")
    MEDICAL_LEAVE = "medical_leave", _("Medical Leave")
    OFF_IN_LIEU = "off_in_lieu", _("Off in Lieu")
    DAY_OFF = "day_off", _("Public Holiday")
    CHILDCARE_LEAVE = "childcare_leave", _("Childcare Leave")
    CHILDCARE_LEAVE_HALFDAY = "childcare_leave_halfday", _("Childcare Leave (Half Day)")
    NOPAY_LEAVE = "nopay_leave", _("No Pay Leave")
    NOPAY_LEAVE_HALFDAY = "nopay_leave_halfday", _("No Pay Leave (Half Day)")
    HOSPITALIZATION_LEAVE = "hospitalization_leave", _("Hospitalization Leave")
    RESERVIST = "reservist", _("Reservist")
    PATERNITY_LEAVE = "paternity_leave", _("Paternity Leave")
    COMPASSIONATE_LEAVE = "compassionate_leave", _("Compassionate Leave")
    MATERNITY_LEAVE = "maternity_leave", _("Maternity Leave")
    SHARED_PARENTAL_LEAVE = "shared_parental_leave", _("Shared Parental Leave")


class HalfDayPeriod(models.TextChoices):
    AM = "AM", _("Morning")
    PM = "PM", _("Afternoon")


class TimesheetStatus(models.TextChoices):
    DRAFT = "draft", _("Draft")
    SUBMITTED = "submitted", _("Submitted")
    APPROVED = "approved", _("Approved")
    REJECTED = "rejected", _("Rejected")


class Decision(models.TextChoices):
    APPROVED = "APPROVED", _("Approved")
    REJECTED = "REJECTED", _("Rejected")


DOCUMENT_REQUIRED_TYPES = frozenset({
    EntryType.ANNUAL_LEAVE,
    EntryType.ANNUAL_LEAVE_HALFDAY,
    EntryType.MEDICAL_LEAVE,
    EntryType.CHILDCARE_LEAVE,
    EntryType.CHILDCARE_LEAVE_HALFDAY,
    EntryType.SHARED_PARENTAL_LEAVE,
    EntryType.NOPAY_LEAVE,
    EntryType.NOPAY_LEAVE_HALFDAY,
    EntryType.HOSPITALIZATION_LEAVE,
    EntryType.RESERVIST,
    EntryType.PATERNITY_LEAVE,
    EntryType.COMPASSIONATE_LEAVE,
    EntryType.MATERNITY_LEAVE,
})

HALF_DAY_TYPES = frozenset({
    EntryType.ANNUAL_LEAVE_HALFDAY,
    EntryType.CHILDCARE_LEAVE_HALFDAY,
    EntryType.NOPAY_LEAVE_HALFDAY,
})

# statuses in which the employee may still change entries
EDITABLE_STATUSES = frozenset({TimesheetStatus.DRAFT, TimesheetStatus.REJECTED})
# statuses that count as "handed in" for the eligibility window
SUBMITTED_STATUSES = frozenset({TimesheetStatus.SUBMITTED, TimesheetStatus.APPROVED})


def requires_documents(entry_type: str) -> bool:
    return entry_type in DOCUMENT_REQUIRED_TYPES


def is_half_day(entry_type: str) -> bool:
    return entry_type in HALF_DAY_TYPES


def is_leave(entry_type: str) -> bool:
    return entry_type not in (EntryType.WORKING_HOURS, EntryType.DAY_OFF)
