# timesheets/validation.py
from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping

from django.utils.translation import gettext_lazy as _

from .choices import EntryType, HalfDayPeriod
from .domain import Entry
from .exceptions import ValidationError, DataIntegrityError

MIN_SHIFT_MINUTES = 30
MAX_SHIFT_MINUTES = 16 * 60


def entry_errors(entry: Entry, *, today: date) -> dict[str, list[str]]:
    """Field → messages for everything wrong with a single entry."""
    errors: dict[str, list[str]] = {}

    def add(field: str, msg) -> None:
        errors.setdefault(field, []).append(str(msg))

    if entry.entry_type not in EntryType.values:
        add("entry_type", _("Unknown entry type '{t}'.").format(t=entry.entry_type))
        return errors

    # ---- working hours (overnight shifts allowed)
    if entry.entry_type == EntryType.WORKING_HOURS:
        if not (entry.start_time and entry.end_time):
            add("end_time", _("Please set both start and end times for working hours."))
        else:
            minutes = entry.working_minutes
            if minutes > MAX_SHIFT_MINUTES:
                add("end_time", _("Working hours cannot exceed 16 hours per shift."))
            elif minutes < MIN_SHIFT_MINUTES:
                add("end_time", _("Working hours must be at least 30 minutes."))
    elif entry.start_time or entry.end_time:
        add("start_time", _("Start and end times only apply to working hours."))

    # ---- half day period, iff half-day type
    if entry.is_half_day:
        if entry.half_day_period not in HalfDayPeriod.values:
            add("half_day_period", _("Please select AM or PM for half day leave."))
    elif entry.half_day_period:
        add("half_day_period", _("A half day period only applies to half day leave."))

    # ---- date earned, iff off in lieu
    if entry.entry_type == EntryType.OFF_IN_LIEU:
        if entry.date_earned is None:
            add("date_earned", _("Date earned is required for Off in Lieu entries."))
        else:
            if entry.date_earned > today:
                add("date_earned", _("Date earned cannot be in the future."))
            if entry.date_earned >= entry.date:
                add("date_earned", _("Date earned must be before the Off in Lieu date."))
    elif entry.date_earned is not None:
        add("date_earned", _("Date earned only applies to Off in Lieu entries."))

    # ---- documents: either own files or a reference, never both, never neither
    if entry.requires_documents:
        if entry.has_documents and entry.document_reference:
            add("supporting_documents", _("An entry holds documents or references another day, not both."))
        elif not entry.has_documents and not entry.document_reference:
            add("supporting_documents", _("Supporting documents are required for this leave type."))
    elif entry.document_reference:
        add("document_reference", _("Only leave types that need documents can reference another day."))

    if entry.document_reference:
        ref = entry.document_reference
        if ref == entry.date:
            add("document_reference", _("An entry cannot reference itself."))
        elif (ref.year, ref.month) != (entry.date.year, entry.date.month):
            add("document_reference", _("Referenced documents must be in the same month."))

    return errors


def validate_entry(entry: Entry, *, today: date) -> Entry:
    errors = entry_errors(entry, today=today)
    if errors:
        raise ValidationError(errors)
    return entry


def incomplete_entries(entries: Iterable[Entry], *, today: date) -> dict[str, list[str]]:
    """ISO date → flattened messages, for every entry that fails validation."""
    out: dict[str, list[str]] = {}
    for e in entries:
        errs = entry_errors(e, today=today)
        if errs:
            out[e.date.isoformat()] = [m for msgs in errs.values() for m in msgs]
    return out


def check_document_links(entries: Mapping[date, Entry]) -> None:
    """
    Every document reference must land on an entry that holds the files itself.
    Anything else (deleted primary day, reference chains) is a data problem.
    """
    broken = []
    for day, e in sorted(entries.items()):
        if not e.document_reference:
            continue
        target = entries.get(e.document_reference)
        if target is None or not target.has_documents or target.document_reference:
            broken.append(f"{day.isoformat()} → {e.document_reference.isoformat()}")
    if broken:
        raise DataIntegrityError(
            "Document references without a primary document day: " + ", ".join(broken)
        )
