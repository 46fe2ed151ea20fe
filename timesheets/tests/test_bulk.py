"""
Tests for BulkEditCoordinator: template expansion and document linkage.
"""
from datetime import date, time

from django.test import SimpleTestCase

from timesheets.bulk import BulkEditCoordinator, EntryTemplate, reference_note
from timesheets.choices import EntryType, HalfDayPeriod
from timesheets.exceptions import ValidationError
from timesheets.presets import FallbackPreset
from timesheets.repository import InMemoryTimesheetRepository
from timesheets.store import EntryStore

from .helpers import doc

TODAY = date(2025, 7, 10)
MON, TUE, WED = date(2025, 7, 7), date(2025, 7, 8), date(2025, 7, 9)


class BulkTestBase(SimpleTestCase):

    def setUp(self):
        self.repo = InMemoryTimesheetRepository({1: 10})
        self.store = EntryStore(self.repo, today=TODAY)
        self.store.load(1, 2025, 7)
        self.bulk = BulkEditCoordinator(self.store)


class DocumentLinkageTest(BulkTestBase):

    def test_first_day_holds_documents_others_reference_it(self):
        entries = self.bulk.apply(
            [WED, MON, TUE, MON], EntryTemplate(EntryType.MEDICAL_LEAVE), documents=[doc()],
        )
        self.assertEqual([e.date for e in entries], [MON, TUE, WED])

        primary = [e for e in entries if e.has_documents]
        self.assertEqual(len(primary), 1)
        self.assertEqual(primary[0].date, MON)
        self.assertTrue(primary[0].is_primary_document)
        for e in entries[1:]:
            self.assertEqual(e.document_reference, MON)
            self.assertFalse(e.is_primary_document)
            self.assertIn("(References documents from Jul 07)", e.notes)

    def test_caller_can_move_primary_day(self):
        entries = self.bulk.apply(
            [MON, TUE, WED], EntryTemplate(EntryType.MEDICAL_LEAVE), documents=[doc()], primary_day=WED,
        )
        by_day = {e.date: e for e in entries}
        self.assertTrue(by_day[WED].is_primary_document)
        self.assertEqual(by_day[MON].document_reference, WED)
        self.assertEqual(by_day[TUE].document_reference, WED)

    def test_primary_day_must_be_selected(self):
        with self.assertRaises(ValidationError):
            self.bulk.apply([MON, TUE], EntryTemplate(EntryType.MEDICAL_LEAVE), documents=[doc()], primary_day=WED)

    def test_no_documents_rejects_whole_batch(self):
        with self.assertRaises(ValidationError):
            self.bulk.apply([MON, TUE], EntryTemplate(EntryType.MEDICAL_LEAVE))
        self.assertFalse(self.store.has_unsaved_changes)

    def test_notes_override_keeps_reference_fragment(self):
        entries = self.bulk.apply(
            [MON, TUE], EntryTemplate(EntryType.MEDICAL_LEAVE, notes="Sick"), documents=[doc()],
            overrides={TUE: {"notes": "Follow-up visit"}},
        )
        self.assertEqual(entries[0].notes, "Sick")
        self.assertEqual(entries[1].notes, f"Follow-up visit {reference_note(MON)}")

    def test_half_day_batch_commits_with_valid_links(self):
        self.bulk.apply(
            [MON, TUE],
            EntryTemplate(EntryType.ANNUAL_LEAVE_HALFDAY, half_day_period=HalfDayPeriod.PM),
            documents=[doc("form.pdf")],
        )
        ts = self.store.commit_draft()
        self.assertEqual(ts.entries[TUE].document_reference, MON)
        self.assertEqual(ts.entries[MON].supporting_documents[0].name, "form.pdf")


class OffInLieuTest(BulkTestBase):

    def test_every_day_needs_its_own_date_earned(self):
        with self.assertRaises(ValidationError) as ctx:
            self.bulk.apply(
                [MON, TUE, WED], EntryTemplate(EntryType.OFF_IN_LIEU),
                overrides={MON: {"date_earned": date(2025, 6, 28)}},
            )
        msg = ctx.exception.message_dict["date_earned"][0]
        self.assertIn("all 3 days", msg)
        self.assertIn("2 days still need earned dates", msg)
        self.assertFalse(self.store.has_unsaved_changes)

    def test_shared_template_value_is_not_enough_for_many_days(self):
        with self.assertRaises(ValidationError):
            self.bulk.apply([MON, TUE], EntryTemplate(EntryType.OFF_IN_LIEU, date_earned=date(2025, 6, 28)))

    def test_per_day_dates_earned(self):
        earned = {MON: date(2025, 6, 7), TUE: date(2025, 6, 14)}
        entries = self.bulk.apply(
            [MON, TUE], EntryTemplate(EntryType.OFF_IN_LIEU),
            overrides={d: {"date_earned": v} for d, v in earned.items()},
        )
        self.assertEqual({e.date: e.date_earned for e in entries}, earned)

    def test_date_earned_in_future_rejected_by_store(self):
        with self.assertRaises(ValidationError):
            self.bulk.apply([MON], EntryTemplate(EntryType.OFF_IN_LIEU, date_earned=date(2025, 7, 12)))


class EdgeCasesTest(BulkTestBase):

    def test_empty_selection_is_noop_with_warning(self):
        with self.assertLogs("timesheets", level="WARNING"):
            self.assertEqual(self.bulk.apply([], EntryTemplate(EntryType.DAY_OFF)), [])
        self.assertFalse(self.store.has_unsaved_changes)

    def test_unknown_override_field(self):
        with self.assertRaises(ValidationError):
            self.bulk.apply([MON], EntryTemplate(EntryType.DAY_OFF), overrides={MON: {"entry_type": "x"}})

    def test_preset_template(self):
        preset = FallbackPreset(name="Default Hours", start_time=time(9), end_time=time(18))
        entries = self.bulk.apply([MON, TUE], EntryTemplate.from_preset(preset))
        self.assertTrue(all(e.working_minutes == 540 for e in entries))
        self.assertEqual(len(self.store.pending), 2)
