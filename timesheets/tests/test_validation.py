"""
Tests for single-entry validation and document link checks.
"""
from datetime import date, time

from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import SimpleTestCase

from timesheets.choices import EntryType, HalfDayPeriod
from timesheets.domain import Entry
from timesheets.exceptions import DataIntegrityError, ValidationError
from timesheets.validation import check_document_links, entry_errors, incomplete_entries, validate_entry

from .helpers import doc, working

TODAY = date(2025, 7, 10)


class WorkingHoursRulesTest(SimpleTestCase):

    def test_regular_day_is_valid(self):
        self.assertEqual(entry_errors(working(date(2025, 7, 7)), today=TODAY), {})

    def test_overnight_shift_counts_into_next_day(self):
        e = working(date(2025, 7, 7), "22:00", "06:00")
        self.assertTrue(e.is_overnight)
        self.assertEqual(e.working_minutes, 8 * 60)
        self.assertEqual(entry_errors(e, today=TODAY), {})

    def test_too_short_and_too_long(self):
        short = working(date(2025, 7, 7), "09:00", "09:20")
        long = working(date(2025, 7, 7), "06:00", "23:00")
        self.assertIn("end_time", entry_errors(short, today=TODAY))
        self.assertIn("end_time", entry_errors(long, today=TODAY))

    def test_both_times_required(self):
        e = Entry(date=date(2025, 7, 7), entry_type=EntryType.WORKING_HOURS, start_time=time(9))
        self.assertIn("end_time", entry_errors(e, today=TODAY))

    def test_times_on_leave_are_rejected(self):
        e = Entry(
            date=date(2025, 7, 7), entry_type=EntryType.MEDICAL_LEAVE,
            start_time=time(9), end_time=time(18), supporting_documents=[doc()],
        )
        self.assertIn("start_time", entry_errors(e, today=TODAY))


class LeaveRulesTest(SimpleTestCase):

    def test_half_day_needs_period(self):
        e = Entry(date=date(2025, 7, 7), entry_type=EntryType.ANNUAL_LEAVE_HALFDAY, supporting_documents=[doc()])
        self.assertIn("half_day_period", entry_errors(e, today=TODAY))
        ok = Entry(
            date=date(2025, 7, 7), entry_type=EntryType.ANNUAL_LEAVE_HALFDAY,
            half_day_period=HalfDayPeriod.AM, supporting_documents=[doc()],
        )
        self.assertEqual(entry_errors(ok, today=TODAY), {})

    def test_off_in_lieu_date_earned(self):
        day = date(2025, 7, 7)
        missing = Entry(date=day, entry_type=EntryType.OFF_IN_LIEU)
        future = Entry(date=date(2025, 7, 21), entry_type=EntryType.OFF_IN_LIEU, date_earned=date(2025, 7, 15))
        after = Entry(date=day, entry_type=EntryType.OFF_IN_LIEU, date_earned=date(2025, 7, 8))
        same_day = Entry(date=day, entry_type=EntryType.OFF_IN_LIEU, date_earned=day)
        day_before = Entry(date=day, entry_type=EntryType.OFF_IN_LIEU, date_earned=date(2025, 7, 6))
        ok = Entry(date=day, entry_type=EntryType.OFF_IN_LIEU, date_earned=date(2025, 6, 28))

        self.assertIn("date_earned", entry_errors(missing, today=TODAY))
        self.assertIn("Date earned cannot be in the future.", entry_errors(future, today=TODAY)["date_earned"])
        self.assertIn("date_earned", entry_errors(after, today=TODAY))
        self.assertIn(
            "Date earned must be before the Off in Lieu date.", entry_errors(same_day, today=TODAY)["date_earned"]
        )
        self.assertEqual(entry_errors(day_before, today=TODAY), {})
        self.assertEqual(entry_errors(ok, today=TODAY), {})

    def test_documents_or_reference_never_both_never_neither(self):
        day = date(2025, 7, 8)
        neither = Entry(date=day, entry_type=EntryType.MEDICAL_LEAVE)
        both = Entry(
            date=day, entry_type=EntryType.MEDICAL_LEAVE,
            supporting_documents=[doc()], document_reference=date(2025, 7, 7),
        )
        ref_only = Entry(date=day, entry_type=EntryType.MEDICAL_LEAVE, document_reference=date(2025, 7, 7))

        self.assertIn("supporting_documents", entry_errors(neither, today=TODAY))
        self.assertIn("supporting_documents", entry_errors(both, today=TODAY))
        self.assertEqual(entry_errors(ref_only, today=TODAY), {})

    def test_reference_must_stay_in_month_and_not_point_at_itself(self):
        own = Entry(date=date(2025, 7, 8), entry_type=EntryType.MEDICAL_LEAVE, document_reference=date(2025, 7, 8))
        other_month = Entry(
            date=date(2025, 7, 1), entry_type=EntryType.MEDICAL_LEAVE, document_reference=date(2025, 6, 30),
        )
        self.assertIn("document_reference", entry_errors(own, today=TODAY))
        self.assertIn("document_reference", entry_errors(other_month, today=TODAY))

    def test_day_off_needs_nothing(self):
        e = Entry(date=date(2025, 7, 7), entry_type=EntryType.DAY_OFF)
        self.assertEqual(entry_errors(e, today=TODAY), {})

    def test_unknown_type(self):
        e = Entry(date=date(2025, 7, 7), entry_type="sabbatical")
        self.assertIn("entry_type", entry_errors(e, today=TODAY))


class ValidateEntryTest(SimpleTestCase):

    def test_raises_engine_and_django_validation_error(self):
        e = Entry(date=date(2025, 7, 7), entry_type=EntryType.OFF_IN_LIEU)
        with self.assertRaises(ValidationError) as ctx:
            validate_entry(e, today=TODAY)
        self.assertIsInstance(ctx.exception, DjangoValidationError)
        self.assertIn("date_earned", ctx.exception.message_dict)

    def test_incomplete_entries_keyed_by_iso_date(self):
        bad = Entry(date=date(2025, 7, 9), entry_type=EntryType.MEDICAL_LEAVE)
        out = incomplete_entries([working(date(2025, 7, 7)), bad], today=TODAY)
        self.assertEqual(list(out), ["2025-07-09"])


class DocumentLinksTest(SimpleTestCase):

    def test_reference_to_missing_day_is_integrity_error(self):
        entries = {
            date(2025, 7, 8): Entry(
                date=date(2025, 7, 8), entry_type=EntryType.MEDICAL_LEAVE, document_reference=date(2025, 7, 7),
            ),
        }
        with self.assertRaises(DataIntegrityError):
            check_document_links(entries)

    def test_valid_link(self):
        primary = Entry(
            date=date(2025, 7, 7), entry_type=EntryType.MEDICAL_LEAVE,
            supporting_documents=[doc()], is_primary_document=True,
        )
        ref = Entry(date=date(2025, 7, 8), entry_type=EntryType.MEDICAL_LEAVE, document_reference=date(2025, 7, 7))
        check_document_links({primary.date: primary, ref.date: ref})
