# File: employees/tests.py
# Version: 1.1.0
# Author: vas
# Modified: 2026-10-19

from datetime import date

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import SimpleTestCase, TestCase

from people.models import Person
from .models import Employee, HolidayCalendar, active_holidays, easter_date, iter_month_dates, month_days


# =========================
# Helpers
# =========================

class DateHelpersTest(SimpleTestCase):

    def test_month_days(self):
        self.assertEqual(month_days(2024, 2), 29)
        self.assertEqual(month_days(2025, 2), 28)
        self.assertEqual(len(list(iter_month_dates(2025, 7))), 31)

    def test_easter(self):
        self.assertEqual(easter_date(2024), date(2024, 3, 31))
        self.assertEqual(easter_date(2025), date(2025, 4, 20))


# =========================
# Holiday calendar
# =========================

class HolidayCalendarTest(TestCase):

    RULES = (
        "# national\n"
        "01-01 | New Year's Day\n"
        "EASTER-2 | Good Friday\n"
        "08-09 | National Day\n"
        "2025-05-12 | Vesak Day\n"
        "not a rule\n"
        "02-30 | never\n"
    )

    def test_rules(self):
        cal = HolidayCalendar(name="SG", rules_text=self.RULES)
        labeled = cal.holidays_for_year_labeled(2025)
        self.assertEqual(labeled[date(2025, 1, 1)], "New Year's Day")
        self.assertEqual(labeled[date(2025, 4, 18)], "Good Friday")
        self.assertEqual(labeled[date(2025, 5, 12)], "Vesak Day")
        self.assertEqual(len(labeled), 4)
        self.assertNotIn(date(2026, 5, 12), cal.holidays_for_year(2026))

    def test_holidays_in_month(self):
        cal = HolidayCalendar(name="SG", rules_text=self.RULES)
        self.assertEqual(cal.holidays_in_month(2025, 8), frozenset({date(2025, 8, 9)}))

    def test_active_holidays_uses_active_calendar_only(self):
        HolidayCalendar.objects.create(name="Draft", rules_text="07-01 | Not used")
        self.assertEqual(active_holidays(2025, 7), frozenset())
        HolidayCalendar.objects.create(name="SG", rules_text="07-28 | Company Day", is_active=True)
        self.assertEqual(active_holidays(2025, 7), frozenset({date(2025, 7, 28)}))

    def test_only_one_active(self):
        HolidayCalendar.objects.create(name="A", is_active=True)
        with self.assertRaises(ValidationError):
            HolidayCalendar(name="B", is_active=True).full_clean()


# =========================
# Employee
# =========================

class EmployeeModelTest(TestCase):

    def setUp(self):
        self.person = Person.objects.create(first_name="Eli", last_name="Employee")
        self.sup = Person.objects.create(first_name="Sam", last_name="Super")

    def test_reports_relation(self):
        emp = Employee.objects.create(person=self.person, supervisor=self.sup, staff_no="E-1")
        self.assertEqual(list(self.sup.reports.all()), [emp])
        self.assertEqual(self.person.employment, emp)

    def test_cannot_supervise_self(self):
        with self.assertRaises(ValidationError):
            Employee(person=self.person, supervisor=self.person).full_clean()
        with self.assertRaises(IntegrityError), transaction.atomic():
            Employee.objects.create(person=self.person, supervisor=self.person)
