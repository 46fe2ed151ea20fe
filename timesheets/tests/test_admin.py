"""
Admin surface: who sees which sheets, and the approve/reject object actions.
"""

from django.contrib.admin.sites import site
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.contrib.messages import get_messages
from django.contrib.messages.storage.cookie import CookieStorage
from django.test import RequestFactory, TestCase
from django.utils import timezone

from core.utils.authz import TIMESHEETS_MANAGER, refresh_acl_cache
from employees.models import Employee
from people.models import Person
from standins.models import StandinDelegation
from timesheets.choices import Decision, TimesheetStatus
from timesheets.models import ApprovalRecord, MonthlyTimesheet

User = get_user_model()


class MonthlyTimesheetAdminTest(TestCase):

    def setUp(self):
        refresh_acl_cache()
        self.factory = RequestFactory()
        self.admin = site._registry[MonthlyTimesheet]

        self.sup_user = User.objects.create_user("sam", password="x", is_staff=True)
        self.emp_user = User.objects.create_user("eli", password="x", is_staff=True)
        self.other_user = User.objects.create_user("olli", password="x", is_staff=True)

        self.sup = Person.objects.create(first_name="Sam", last_name="Super", user=self.sup_user)
        self.emp = Person.objects.create(first_name="Eli", last_name="Employee", user=self.emp_user)
        self.other = Person.objects.create(first_name="Olli", last_name="Other", user=self.other_user)

        employee = Employee.objects.create(person=self.emp, supervisor=self.sup)
        self.sheet = MonthlyTimesheet.objects.create(
            employee=employee, year=2025, month=6, status=TimesheetStatus.SUBMITTED,
        )

    def tearDown(self):
        refresh_acl_cache()

    def request(self, user, data=None):
        request = self.factory.post("/", data or {})
        request.user = user
        request._messages = CookieStorage(request)
        return request

    def visible(self, user):
        return list(self.admin.get_queryset(self.request(user)))

    def test_queryset_scoping(self):
        self.assertEqual(self.visible(self.emp_user), [self.sheet])
        self.assertEqual(self.visible(self.sup_user), [self.sheet])
        self.assertEqual(self.visible(self.other_user), [])

    def test_managers_see_everything(self):
        self.other_user.groups.add(Group.objects.create(name=TIMESHEETS_MANAGER))
        self.assertEqual(self.visible(self.other_user), [self.sheet])

    def test_active_standin_sees_delegated_reports(self):
        today = timezone.localdate()
        StandinDelegation.objects.create(supervisor=self.sup, standin=self.other, start_date=today, end_date=today)
        self.assertEqual(self.visible(self.other_user), [self.sheet])

    def test_supervisor_approves_from_change_page(self):
        request = self.request(self.sup_user)
        response = self.admin.approve_timesheet(request, self.sheet)
        self.assertEqual(response.status_code, 302)

        self.sheet.refresh_from_db()
        self.assertEqual(self.sheet.status, TimesheetStatus.APPROVED)
        self.assertEqual(self.sheet.approved_by, self.sup)
        self.assertEqual(ApprovalRecord.objects.filter(timesheet=self.sheet).count(), 1)

    def test_outsider_gets_error_message_and_nothing_changes(self):
        request = self.request(self.other_user)
        self.admin.approve_timesheet(request, self.sheet)

        self.sheet.refresh_from_db()
        self.assertEqual(self.sheet.status, TimesheetStatus.SUBMITTED)
        self.assertFalse(ApprovalRecord.objects.exists())
        self.assertEqual(len(list(get_messages(request))), 1)

    def test_reject_first_asks_for_a_reason(self):
        request = self.factory.get("/")
        request.user = self.sup_user
        request._messages = CookieStorage(request)
        response = self.admin.reject_timesheet(request, self.sheet)

        self.assertEqual(response.status_code, 200)
        self.assertIn(b'name="comments"', response.content)
        self.sheet.refresh_from_db()
        self.assertEqual(self.sheet.status, TimesheetStatus.SUBMITTED)

    def test_supervisor_rejects_with_comments(self):
        request = self.request(self.sup_user, {"comments": "  June 12 is missing  "})
        response = self.admin.reject_timesheet(request, self.sheet)
        self.assertEqual(response.status_code, 302)

        self.sheet.refresh_from_db()
        self.assertEqual(self.sheet.status, TimesheetStatus.REJECTED)
        self.assertEqual(self.sheet.approval_comments, "June 12 is missing")
        rec = ApprovalRecord.objects.get(timesheet=self.sheet)
        self.assertEqual(rec.action, Decision.REJECTED)
        self.assertEqual(rec.comments, "June 12 is missing")

    def test_reject_without_comments_changes_nothing(self):
        request = self.request(self.sup_user, {"comments": "   "})
        response = self.admin.reject_timesheet(request, self.sheet)
        self.assertEqual(response.status_code, 302)

        self.sheet.refresh_from_db()
        self.assertEqual(self.sheet.status, TimesheetStatus.SUBMITTED)
        self.assertFalse(ApprovalRecord.objects.exists())
        self.assertEqual(len(list(get_messages(request))), 1)

    def test_decision_actions_only_on_submitted_sheets(self):
        request = self.factory.get("/")
        request.user = User.objects.create_superuser("root", password="x")
        actions = self.admin.get_change_actions(request, str(self.sheet.pk), "")
        self.assertEqual(list(actions), ["approve_timesheet", "reject_timesheet"])

        MonthlyTimesheet.objects.filter(pk=self.sheet.pk).update(status=TimesheetStatus.APPROVED)
        self.assertEqual(list(self.admin.get_change_actions(request, str(self.sheet.pk), "")), [])
