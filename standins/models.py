# File: standins/models.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from __future__ import annotations

from datetime import date

from django.core.exceptions import ValidationError
from django.core.validators import MaxLengthValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from simple_history.models import HistoricalRecords
from concurrency.fields import AutoIncVersionField

from people.models import Person


class DelegationStatus(models.TextChoices):
    ACTIVE = "ACTIVE", _("Active")
    INACTIVE = "INACTIVE", _("Inactive")
    CANCELLED = "CANCELLED", _("Cancelled")


class StandinDelegationQuerySet(models.QuerySet):
    def active_on(self, day: date):
        return self.filter(status=DelegationStatus.ACTIVE, start_date__lte=day, end_date__gte=day)

    def overlapping(self, supervisor_id: int, start: date, end: date):
        return self.filter(
            supervisor_id=supervisor_id,
            status=DelegationStatus.ACTIVE,
            start_date__lte=end,
            end_date__gte=start,
        )


class StandinDelegation(models.Model):
    """
    Time-bounded grant: `standin` may decide on timesheets in place of
    `supervisor` between start_date and end_date (both inclusive).
    """
    supervisor = models.ForeignKey(
        Person, on_delete=models.PROTECT, related_name="delegations_given", verbose_name=_("Supervisor")
    )
    standin = models.ForeignKey(
        Person, on_delete=models.PROTECT, related_name="delegations_received", verbose_name=_("Stand-in")
    )
    start_date = models.DateField(_("Start date"))
    end_date = models.DateField(_("End date"))
    status = models.CharField(
        _("Status"), max_length=10, choices=DelegationStatus.choices, default=DelegationStatus.ACTIVE, db_index=True
    )
    reason = models.TextField(_("Reason"), blank=True, validators=[MaxLengthValidator(1000)])

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    history = HistoricalRecords()
    version = AutoIncVersionField()

    objects = StandinDelegationQuerySet.as_manager()

    class Meta:
        verbose_name = _("Stand-in delegation")
        verbose_name_plural = _("Stand-in delegations")
        ordering = ("-start_date", "-id")
        indexes = [
            models.Index(fields=["supervisor", "status", "start_date", "end_date"]),
            models.Index(fields=["standin", "status"]),
        ]
        constraints = [
            models.CheckConstraint(
                check=models.Q(start_date__lte=models.F("end_date")),
                name="ck_delegation_dates_ordered",
            ),
            models.CheckConstraint(
                check=~models.Q(supervisor=models.F("standin")),
                name="ck_delegation_not_self",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.supervisor} → {self.standin} ({self.start_date:%Y-%m-%d}–{self.end_date:%Y-%m-%d})"

    def clean(self):
        errors = {}
        if self.supervisor_id and self.standin_id and self.supervisor_id == self.standin_id:
            errors["standin"] = _("A supervisor cannot delegate to themselves.")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            errors["end_date"] = _("End date must be on or after the start date.")
        if self.reason and len(self.reason) > 1000:
            errors["reason"] = _("Reason cannot exceed 1000 characters.")
        if errors:
            raise ValidationError(errors)

    # ---- read helpers

    def is_active_on(self, day: date) -> bool:
        return self.status == DelegationStatus.ACTIVE and self.start_date <= day <= self.end_date

    @property
    def is_expired(self) -> bool:
        return self.end_date < timezone.localdate()

    @property
    def standin_name(self) -> str:
        return self.standin.display_name

    @property
    def standin_email(self) -> str:
        return self.standin.email
