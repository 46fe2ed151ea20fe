# File: standins/tests.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from datetime import date, datetime, timezone as dt_timezone

from django.core.exceptions import PermissionDenied, ValidationError as DjangoValidationError
from django.test import SimpleTestCase, TestCase

from people.models import Person
from timesheets.choices import Decision, TimesheetStatus
from timesheets.exceptions import DataIntegrityError, ValidationError
from timesheets.models import ApprovalRecord, MonthlyTimesheet
from employees.models import Employee

from .models import DelegationStatus, StandinDelegation
from .services import (
    approvals_for, cancel_delegation, create_delegation, delegations_for, update_delegation,
)
from .substitution import (
    Delegation, DjangoDelegationDirectory, InMemoryDelegationDirectory, resolve_approver,
)

TODAY = date(2025, 7, 1)


# =========================
# Substitution (no database)
# =========================

class ResolveApproverTest(SimpleTestCase):

    def setUp(self):
        self.directory = InMemoryDelegationDirectory(names={10: "Sam Super", 20: "Dana Deputy"})

    def delegate(self, pk, standin, start, end, status=DelegationStatus.ACTIVE):
        self.directory.delegations.append(Delegation(
            id=pk, supervisor_id=10, standin_id=standin, start_date=start, end_date=end, status=status,
        ))

    def test_no_delegation_means_supervisor(self):
        approver = resolve_approver(10, TODAY, self.directory)
        self.assertEqual((approver.acting_id, approver.acting_name), (10, "Sam Super"))
        self.assertFalse(approver.is_standin)

    def test_active_delegation_substitutes(self):
        self.delegate(1, 20, date(2025, 7, 1), date(2025, 7, 15))
        approver = resolve_approver(10, date(2025, 7, 15), self.directory)
        self.assertEqual(approver.acting_id, 20)
        self.assertEqual(approver.acting_name, "Dana Deputy")
        self.assertEqual(approver.on_behalf_of, 10)

    def test_boundaries_are_inclusive(self):
        self.delegate(1, 20, date(2025, 7, 1), date(2025, 7, 15))
        self.assertEqual(resolve_approver(10, date(2025, 6, 30), self.directory).acting_id, 10)
        self.assertEqual(resolve_approver(10, date(2025, 7, 1), self.directory).acting_id, 20)
        self.assertEqual(resolve_approver(10, date(2025, 7, 16), self.directory).acting_id, 10)

    def test_cancelled_delegation_is_ignored(self):
        self.delegate(1, 20, date(2025, 7, 1), date(2025, 7, 15), status=DelegationStatus.CANCELLED)
        self.assertEqual(resolve_approver(10, TODAY, self.directory).acting_id, 10)

    def test_overlap_is_integrity_error(self):
        self.delegate(1, 20, date(2025, 7, 1), date(2025, 7, 15))
        self.delegate(2, 30, date(2025, 7, 10), date(2025, 7, 20))
        self.assertEqual(resolve_approver(10, date(2025, 7, 5), self.directory).acting_id, 20)
        with self.assertRaises(DataIntegrityError):
            resolve_approver(10, date(2025, 7, 12), self.directory)


# =========================
# Services / ORM
# =========================

class DelegationServiceTest(TestCase):

    def setUp(self):
        self.sup = Person.objects.create(first_name="Sam", last_name="Super", email="sam@example.org")
        self.dana = Person.objects.create(first_name="Dana", last_name="Deputy", email="dana@example.org")
        self.olli = Person.objects.create(first_name="Olli", last_name="Other")

    def create(self, standin=None, start=date(2025, 7, 1), end=date(2025, 7, 15), **kw):
        return create_delegation(self.sup, standin or self.dana, start, end, today=TODAY, **kw)

    def test_create(self):
        obj = self.create(reason="Annual leave")
        self.assertEqual(obj.status, DelegationStatus.ACTIVE)
        self.assertEqual(obj.standin_name, "Dana Deputy")
        self.assertEqual(obj.standin_email, "dana@example.org")
        self.assertTrue(obj.is_active_on(date(2025, 7, 15)))
        self.assertFalse(obj.is_active_on(date(2025, 7, 16)))

    def test_self_delegation_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.create(standin=self.sup)
        self.assertIn("standin", ctx.exception.message_dict)

    def test_dates_must_be_ordered(self):
        with self.assertRaises(ValidationError):
            self.create(start=date(2025, 7, 10), end=date(2025, 7, 1))

    def test_end_in_past_rejected(self):
        with self.assertRaises(ValidationError):
            self.create(start=date(2025, 6, 1), end=date(2025, 6, 30))

    def test_overlap_rejected_but_adjacent_allowed(self):
        self.create()
        with self.assertRaises(ValidationError):
            self.create(standin=self.olli, start=date(2025, 7, 15), end=date(2025, 7, 20))
        self.create(standin=self.olli, start=date(2025, 7, 16), end=date(2025, 7, 20))
        self.assertEqual(delegations_for(self.sup).count(), 2)

    def test_cancelled_delegation_frees_the_range(self):
        first = self.create()
        cancel_delegation(first, by=self.sup)
        self.create(standin=self.olli)
        self.assertEqual(delegations_for(self.sup, include_cancelled=False).get().standin, self.olli)

    def test_update_excludes_itself_from_overlap(self):
        obj = self.create()
        update_delegation(obj, end_date=date(2025, 7, 20), today=TODAY)
        obj.refresh_from_db()
        self.assertEqual(obj.end_date, date(2025, 7, 20))

    def test_update_cancelled_rejected(self):
        obj = cancel_delegation(self.create())
        with self.assertRaises(ValidationError):
            update_delegation(obj, reason="again", today=TODAY)

    def test_only_supervisor_may_cancel(self):
        obj = self.create()
        with self.assertRaises(PermissionDenied):
            cancel_delegation(obj, by=self.dana)
        obj.refresh_from_db()
        self.assertEqual(obj.status, DelegationStatus.ACTIVE)

    def test_cancel_is_idempotent(self):
        obj = self.create()
        cancel_delegation(obj)
        cancel_delegation(obj)
        self.assertEqual(obj.history.filter(status=DelegationStatus.CANCELLED).count(), 1)

    def test_reason_length(self):
        with self.assertRaises(DjangoValidationError):
            self.create(reason="x" * 1001)
        self.assertFalse(StandinDelegation.objects.exists())

    def test_django_directory(self):
        self.create()
        directory = DjangoDelegationDirectory()
        [d] = directory.active_for(self.sup.pk, date(2025, 7, 3))
        self.assertEqual((d.standin_id, d.standin_name), (self.dana.pk, "Dana Deputy"))
        self.assertEqual(len(directory.delegating_to(self.dana.pk, date(2025, 7, 3))), 1)
        self.assertEqual(directory.active_for(self.sup.pk, date(2025, 7, 16)), [])
        self.assertEqual(directory.display_name(self.sup.pk), "Sam Super")

    def test_approvals_for_supervisor(self):
        emp = Employee.objects.create(
            person=Person.objects.create(first_name="Eli", last_name="Employee"), supervisor=self.sup,
        )
        sheet = MonthlyTimesheet.objects.create(employee=emp, year=2025, month=6, status=TimesheetStatus.APPROVED)
        ApprovalRecord.objects.create(
            timesheet=sheet, action=Decision.APPROVED, acting_identity=self.dana, acting_on_behalf_of=self.sup,
            timestamp=datetime(2025, 7, 5, 12, tzinfo=dt_timezone.utc),
        )
        ApprovalRecord.objects.create(
            timesheet=sheet, action=Decision.APPROVED, acting_identity=self.sup,
            timestamp=datetime(2025, 7, 6, 12, tzinfo=dt_timezone.utc),
        )
        [rec] = approvals_for(self.sup)
        self.assertEqual(rec.acting_identity, self.dana)
