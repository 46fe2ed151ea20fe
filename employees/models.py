# File: employees/models.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from simple_history.models import HistoricalRecords
from concurrency.fields import AutoIncVersionField

from people.models import Person


# ------------------------------
# helpers
# ------------------------------

def month_days(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def iter_month_dates(year: int, month: int) -> Iterable[date]:
    for d in range(1, month_days(year, month) + 1):
        yield date(year, month, d)


# Western (Gregorian) Easter calculation (Anonymous Gregorian algorithm)
def easter_date(year: int) -> date:
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


# ------------------------------
# Holiday calendar (optional)
# ------------------------------

class HolidayCalendar(models.Model):
    """
    Public holidays, one rule per line:
      - MM-DD | Label          → fixed every year (e.g. 08-09 | National Day)
      - EASTER±N | Label       → Easter ± N days (e.g. EASTER-2 | Good Friday)
      - YYYY-MM-DD | Label     → one-off

    When a calendar is active, its dates stop counting as working days for
    timesheet completeness.
    """
    name = models.CharField(_("Name"), max_length=120, unique=True)
    is_active = models.BooleanField(_("Active"), default=False, help_text=_("Use this calendar by default."))
    rules_text = models.TextField(
        _("Rules"),
        blank=True,
        help_text=_(
            "One per line. Examples:\n"
            "  01-01 | New Year's Day\n"
            "  EASTER-2 | Good Friday\n"
            "  2025-05-12 | Vesak Day\n"
        ),
    )

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    history = HistoricalRecords()

    class Meta:
        verbose_name = _("Holiday calendar")
        verbose_name_plural = _("Holiday calendars")
        constraints = [
            models.UniqueConstraint(
                fields=["is_active"],
                condition=models.Q(is_active=True),
                name="uq_holidaycalendar_single_active_true",
            )
        ]

    def clean(self):
        if self.is_active and HolidayCalendar.objects.filter(is_active=True).exclude(pk=self.pk).exists():
            raise ValidationError({
                "is_active": _("Another holiday calendar is already active. Deactivate it first or uncheck this field.")
            })

    def __str__(self) -> str:
        return self.name

    # ---- parsing ----
    @dataclass(frozen=True)
    class _Rule:
        kind: str                 # 'FIXED' | 'EASTER' | 'ONEOFF'
        month: int | None
        day: int | None
        offset: int               # for EASTER±N
        date: date | None         # for ONEOFF
        label: str

    def _parse_rules(self) -> list["_Rule"]:
        rules: list[HolidayCalendar._Rule] = []
        for raw in (self.rules_text or "").splitlines():
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            key, _sep, label = (p.strip() for p in line.partition("|"))
            if not key:
                continue

            m_one = re.fullmatch(r"(\d{4})-(\d{2})-(\d{2})", key)
            if m_one:
                try:
                    dt = date(*map(int, m_one.groups()))
                except ValueError:
                    continue
                rules.append(self._Rule("ONEOFF", None, None, 0, dt, label))
                continue

            m_fix = re.fullmatch(r"(\d{2})-(\d{2})", key)
            if m_fix:
                m, d = map(int, m_fix.groups())
                if 1 <= m <= 12 and 1 <= d <= 31:
                    rules.append(self._Rule("FIXED", m, d, 0, None, label))
                continue

            m_e = re.fullmatch(r"EASTER([+-]\d+)?", key, flags=re.IGNORECASE)
            if m_e:
                rules.append(self._Rule("EASTER", None, None, int(m_e.group(1) or "0"), None, label))
                continue

            # silently ignore malformed lines
        return rules

    def holidays_for_year_labeled(self, year: int) -> dict[date, str]:
        result: dict[date, str] = {}
        easter = easter_date(year)
        for r in self._parse_rules():
            if r.kind == "FIXED":
                try:
                    dt = date(year, r.month, r.day)  # type: ignore[arg-type]
                except ValueError:
                    continue
            elif r.kind == "EASTER":
                dt = easter + timedelta(days=r.offset)
            else:  # ONEOFF
                if not (r.date and r.date.year == year):
                    continue
                dt = r.date
            result[dt] = r.label
        return result

    def holidays_for_year(self, year: int) -> set[date]:
        return set(self.holidays_for_year_labeled(year))

    def holidays_in_month(self, year: int, month: int) -> frozenset[date]:
        return frozenset(d for d in self.holidays_for_year(year) if d.month == month)

    @classmethod
    def get_active(cls) -> "HolidayCalendar | None":
        return cls.objects.filter(is_active=True).first()


def active_holidays(year: int, month: int) -> frozenset[date]:
    """Holidays of the active calendar inside (year, month); empty without one."""
    cal = HolidayCalendar.get_active()
    return cal.holidays_in_month(year, month) if cal else frozenset()


# ------------------------------
# Employee
# ------------------------------

class Employee(models.Model):
    """
    Timesheet owner. `supervisor` is the person who decides on the
    employee's monthly timesheets (unless a stand-in is active).
    """
    person = models.OneToOneField(
        Person,
        on_delete=models.PROTECT,
        related_name="employment",
        verbose_name=_("Person"),
    )
    supervisor = models.ForeignKey(
        Person,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reports",
        verbose_name=_("Supervisor"),
        help_text=_("Approves this employee's timesheets."),
    )

    staff_no = models.CharField(_("Staff number"), max_length=40, blank=True)
    is_active = models.BooleanField(_("Active"), default=True)
    notes = models.TextField(_("Record note"), blank=True)

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    history = HistoricalRecords()
    version = AutoIncVersionField()

    class Meta:
        verbose_name = _("Employee")
        verbose_name_plural = _("Employees")
        ordering = ("person__last_name", "person__first_name")
        constraints = [
            models.CheckConstraint(
                check=~models.Q(supervisor=models.F("person")),
                name="ck_employee_not_own_supervisor",
            ),
        ]

    def __str__(self) -> str:
        return str(self.person)

    def clean(self):
        super().clean()
        if self.person_id and self.supervisor_id == self.person_id:
            raise ValidationError({"supervisor": _("An employee cannot supervise themselves.")})
