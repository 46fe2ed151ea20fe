"""
Tests for EntryStore: the draft overlay over persisted entries.

Covers:
- overlay reads/writes without touching persistence
- tombstone deletes
- commit then load idempotency
- freeze while submitted/approved
- PendingChanges hand-off between requests
"""
from datetime import date

from django.test import SimpleTestCase

from timesheets.choices import EntryType, TimesheetStatus
from timesheets.domain import Entry, PendingChanges
from timesheets.exceptions import DataIntegrityError, StateConflictError, TimesheetError, ValidationError
from timesheets.repository import InMemoryTimesheetRepository
from timesheets.store import EntryStore

from .helpers import doc, sheet, working

TODAY = date(2025, 7, 10)


class EntryStoreTestBase(SimpleTestCase):

    def setUp(self):
        self.repo = InMemoryTimesheetRepository({1: 10})
        self.store = EntryStore(self.repo, today=TODAY)

    def persisted(self):
        return self.repo.load_month(1, 2025, 7).entries


class OverlayTest(EntryStoreTestBase):

    def test_fresh_month_is_unsaved_draft(self):
        ts = self.store.load(1, 2025, 7)
        self.assertIsNone(ts.pk)
        self.assertEqual(ts.status, TimesheetStatus.DRAFT)
        self.assertEqual(ts.supervisor_id, 10)
        self.assertFalse(self.store.has_unsaved_changes)

    def test_save_goes_to_overlay_only(self):
        self.store.load(1, 2025, 7)
        self.store.save_entry(working(date(2025, 7, 7)))

        self.assertTrue(self.store.has_unsaved_changes)
        self.assertIn(date(2025, 7, 7), self.store.get_effective())
        self.assertEqual(self.persisted(), {})

    def test_overlay_overrides_persisted_by_date(self):
        self.repo.put(sheet(1, 2025, 7, [date(2025, 7, 7)]))
        self.store.load(1, 2025, 7)
        self.store.save_entry(working(date(2025, 7, 7), "08:00", "17:00"))

        self.assertEqual(self.store.get(date(2025, 7, 7)).start_time.hour, 8)
        self.assertEqual(self.persisted()[date(2025, 7, 7)].start_time.hour, 9)

    def test_tombstone_hides_persisted_until_commit(self):
        self.repo.put(sheet(1, 2025, 7, [date(2025, 7, 7), date(2025, 7, 8)]))
        self.store.load(1, 2025, 7)
        self.store.delete_entry(date(2025, 7, 7))

        self.assertNotIn(date(2025, 7, 7), self.store.get_effective())
        self.assertIn(date(2025, 7, 7), self.persisted())

        self.store.commit_draft()
        self.assertNotIn(date(2025, 7, 7), self.persisted())
        self.assertIn(date(2025, 7, 8), self.persisted())

    def test_deleting_unsaved_entry_leaves_no_tombstone(self):
        self.store.load(1, 2025, 7)
        self.store.save_entry(working(date(2025, 7, 7)))
        self.store.delete_entry(date(2025, 7, 7))
        self.assertFalse(self.store.has_unsaved_changes)

    def test_invalid_entry_is_not_staged(self):
        self.store.load(1, 2025, 7)
        with self.assertRaises(ValidationError):
            self.store.save_entry(Entry(date=date(2025, 7, 7), entry_type=EntryType.MEDICAL_LEAVE))
        self.assertFalse(self.store.has_unsaved_changes)

    def test_date_outside_month(self):
        self.store.load(1, 2025, 7)
        with self.assertRaises(ValidationError):
            self.store.save_entry(working(date(2025, 8, 1)))

    def test_bulk_save_is_all_or_nothing(self):
        self.store.load(1, 2025, 7)
        bad = Entry(date=date(2025, 7, 9), entry_type=EntryType.OFF_IN_LIEU)
        with self.assertRaises(ValidationError) as ctx:
            self.store.save_bulk([working(date(2025, 7, 7)), working(date(2025, 7, 8)), bad])
        self.assertIn("2025-07-09", ctx.exception.message_dict)
        self.assertFalse(self.store.has_unsaved_changes)

    def test_discard(self):
        self.store.load(1, 2025, 7)
        self.store.save_entry(working(date(2025, 7, 7)))
        self.store.discard()
        self.assertFalse(self.store.has_unsaved_changes)
        self.assertEqual(self.store.get_effective(), {})

    def test_write_before_load(self):
        with self.assertRaises(TimesheetError):
            self.store.save_entry(working(date(2025, 7, 7)))


class CommitTest(EntryStoreTestBase):

    def test_commit_then_load_matches_effective_view(self):
        self.repo.put(sheet(1, 2025, 7, [date(2025, 7, 1), date(2025, 7, 2)]))
        self.store.load(1, 2025, 7)
        self.store.save_entry(working(date(2025, 7, 3), "22:00", "06:00"))
        self.store.save_entry(working(date(2025, 7, 1), "10:00", "19:00"))
        self.store.delete_entry(date(2025, 7, 2))
        before = self.store.get_effective()

        self.store.commit_draft()
        self.assertFalse(self.store.has_unsaved_changes)

        reloaded = EntryStore(self.repo, today=TODAY)
        reloaded.load(1, 2025, 7)
        self.assertEqual(reloaded.get_effective(), before)
        self.assertFalse(reloaded.has_unsaved_changes)

    def test_first_commit_creates_the_sheet(self):
        self.store.load(1, 2025, 7)
        self.store.save_entry(working(date(2025, 7, 7)))
        ts = self.store.commit_draft()
        self.assertIsNotNone(ts.pk)
        self.assertEqual(list(self.persisted()), [date(2025, 7, 7)])

    def test_empty_commit_is_noop(self):
        self.store.load(1, 2025, 7)
        with self.assertLogs("timesheets", level="INFO") as logs:
            ts = self.store.commit_draft()
        self.assertIsNone(ts.pk)
        self.assertIn("Nothing to commit", logs.output[0])

    def test_dangling_document_reference_blocks_commit(self):
        self.store.load(1, 2025, 7)
        self.store.save_entry(Entry(
            date=date(2025, 7, 8), entry_type=EntryType.MEDICAL_LEAVE, document_reference=date(2025, 7, 7),
        ))
        with self.assertRaises(DataIntegrityError):
            self.store.commit_draft()
        self.assertTrue(self.store.has_unsaved_changes)

    def test_reload_drops_overlay(self):
        self.store.load(1, 2025, 7)
        self.store.save_entry(working(date(2025, 7, 7)))
        self.store.reload()
        self.assertFalse(self.store.has_unsaved_changes)


class FreezeTest(EntryStoreTestBase):

    def test_submitted_and_approved_are_frozen(self):
        for status in (TimesheetStatus.SUBMITTED, TimesheetStatus.APPROVED):
            with self.subTest(status=status):
                self.repo.put(sheet(1, 2025, 7, [date(2025, 7, 7)], status=status))
                self.store.load(1, 2025, 7)
                with self.assertRaises(StateConflictError):
                    self.store.save_entry(working(date(2025, 7, 8)))
                with self.assertRaises(StateConflictError):
                    self.store.delete_entry(date(2025, 7, 7))

    def test_rejected_is_editable_again(self):
        self.repo.put(sheet(
            1, 2025, 7, [date(2025, 7, 7)], status=TimesheetStatus.REJECTED, approval_comments="Missing days",
        ))
        self.store.load(1, 2025, 7)
        self.store.save_entry(working(date(2025, 7, 8)))
        self.store.commit_draft()
        self.assertIn(date(2025, 7, 8), self.persisted())


class PendingHandOffTest(EntryStoreTestBase):

    def test_overlay_survives_serialization(self):
        self.repo.put(sheet(1, 2025, 7, [date(2025, 7, 1)]))
        self.store.load(1, 2025, 7)
        self.store.save_entry(Entry(
            date=date(2025, 7, 7), entry_type=EntryType.MEDICAL_LEAVE, supporting_documents=[doc()],
            notes="Flu",
        ))
        self.store.delete_entry(date(2025, 7, 1))
        payload = self.store.pending.to_dict()

        # next request
        other = EntryStore(self.repo, today=TODAY)
        other.load(1, 2025, 7, pending=PendingChanges.from_dict(payload))
        self.assertEqual(other.get_effective(), self.store.get_effective())
        self.assertTrue(other.has_unsaved_changes)


class StatsTest(EntryStoreTestBase):

    def test_month_stats(self):
        self.store.load(1, 2025, 7)
        self.store.save_bulk([
            working(date(2025, 7, 1)),
            working(date(2025, 7, 2)),
            working(date(2025, 7, 3), "22:00", "06:00"),
            Entry(date=date(2025, 7, 4), entry_type=EntryType.MEDICAL_LEAVE, supporting_documents=[doc()]),
            Entry(date=date(2025, 7, 7), entry_type=EntryType.DAY_OFF),
        ])
        stats = self.store.stats()
        self.assertEqual(stats.total_entries, 5)
        self.assertEqual(stats.working_days, 3)
        self.assertEqual(stats.total_hours, 26.0)
        self.assertEqual(stats.leave_days, 1)
