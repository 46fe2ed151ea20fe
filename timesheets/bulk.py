# File: timesheets/bulk.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19
"""
Bulk editing: one template spread over many days.

For leave types that need documents, one day in the batch (the first, unless
the caller picks another) holds the uploaded files; every other day points at
it with document_reference and gets a note saying so.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, time
from typing import Iterable, Mapping, Optional, Sequence

from django.utils.translation import gettext_lazy as _, ngettext

from . import domain
from .choices import EntryType, requires_documents
from .exceptions import ValidationError
from .store import EntryStore

logger = logging.getLogger("timesheets")

# fields a caller may set per day on top of the template
OVERRIDE_FIELDS = frozenset({"notes", "date_earned"})


def reference_note(primary_day: date) -> str:
    return f"(References documents from {primary_day:%b %d})"


@dataclass(frozen=True)
class EntryTemplate:
    entry_type: str
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    half_day_period: Optional[str] = None
    date_earned: Optional[date] = None
    notes: str = ""

    @classmethod
    def from_preset(cls, preset, *, notes: str = "") -> "EntryTemplate":
        """Working hours template from anything with start_time / end_time (a WorkingHoursPreset)."""
        return cls(
            entry_type=EntryType.WORKING_HOURS,
            start_time=preset.start_time,
            end_time=preset.end_time,
            notes=notes,
        )

    def for_day(self, day: date) -> domain.Entry:
        return domain.Entry(
            date=day,
            entry_type=self.entry_type,
            start_time=self.start_time,
            end_time=self.end_time,
            half_day_period=self.half_day_period,
            notes=self.notes,
        )


class BulkEditCoordinator:

    def __init__(self, store: EntryStore):
        self.store = store

    def build(
        self,
        dates: Iterable[date],
        template: EntryTemplate,
        *,
        documents: Sequence[domain.SupportingDocument] = (),
        overrides: Optional[Mapping[date, Mapping]] = None,
        primary_day: Optional[date] = None,
    ) -> list[domain.Entry]:
        """Expand the template into one finished Entry per date (nothing is stored)."""
        days = sorted(set(dates))
        if not days:
            return []
        overrides = dict(overrides or {})

        for day, fields in overrides.items():
            unknown = set(fields) - OVERRIDE_FIELDS
            if unknown:
                raise ValidationError(
                    {day.isoformat(): [f"Unsupported override field(s): {', '.join(sorted(unknown))}."]}
                )
            if day not in days:
                raise ValidationError({day.isoformat(): [str(_("Override for a date that is not selected."))]})

        needs_docs = requires_documents(template.entry_type)
        if needs_docs:
            if not documents:
                raise ValidationError(
                    {"supporting_documents": [str(_("Supporting documents are required for this leave type."))]}
                )
            primary = primary_day or days[0]
            if primary not in days:
                raise ValidationError(
                    {"primary_day": [str(_("The primary document day must be one of the selected dates."))]}
                )
        else:
            primary = None

        if template.entry_type == EntryType.OFF_IN_LIEU:
            self._check_dates_earned(days, template, overrides)

        entries = []
        for day in days:
            over = overrides.get(day, {})
            entry = template.for_day(day)
            if "notes" in over:
                entry = replace(entry, notes=over["notes"] or "")
            if template.entry_type == EntryType.OFF_IN_LIEU:
                entry = replace(entry, date_earned=over.get("date_earned") or template.date_earned)

            if needs_docs:
                if day == primary:
                    entry = replace(entry, supporting_documents=tuple(documents), is_primary_document=True)
                else:
                    notes = f"{entry.notes} {reference_note(primary)}".strip()
                    entry = replace(entry, document_reference=primary, notes=notes)
            entries.append(entry)
        return entries

    def _check_dates_earned(self, days, template, overrides) -> None:
        # a shared template value only counts for single-day batches
        shared = template.date_earned if len(days) == 1 else None
        missing = [d for d in days if not (overrides.get(d, {}).get("date_earned") or shared)]
        if missing:
            msg = ngettext(
                "Please set date earned for all %(total)d days. %(missing)d day still needs an earned date.",
                "Please set date earned for all %(total)d days. %(missing)d days still need earned dates.",
                len(missing),
            ) % {"total": len(days), "missing": len(missing)}
            raise ValidationError({"date_earned": [msg]})

    def apply(self, dates, template, *, documents=(), overrides=None, primary_day=None) -> list[domain.Entry]:
        """Build the batch and put it into the store's overlay as one bulk save."""
        dates = list(dates)
        if not dates:
            logger.warning("Bulk edit called without dates; nothing to do")
            return []
        entries = self.build(
            dates, template, documents=documents, overrides=overrides, primary_day=primary_day,
        )
        self.store.save_bulk(entries)
        logger.info(f"Bulk edit staged {len(entries)} {template.entry_type} entries for {self.store.timesheet}")
        return entries
