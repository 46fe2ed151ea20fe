# people/models.py
import uuid
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords
from concurrency.fields import AutoIncVersionField


class Person(models.Model):
    """
    Identity record for anyone the timesheet engine talks about:
    employees, supervisors and stand-ins.
    """

    # --- Identity ------------------------------------------------------------
    uuid = models.UUIDField(
        _("UUID"),
        default=uuid.uuid4,
        editable=False,
        unique=True,
        help_text=_("Stable system identifier."),
    )
    first_name = models.CharField(_("First name"), max_length=80)
    last_name  = models.CharField(_("Last name"),  max_length=80)

    email = models.EmailField(_("Email"), blank=True)

    # Link to Django account (optional)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="person",
        verbose_name=_("Account"),
        help_text=_("Link to a Django user account (optional)."),
    )

    notes = models.TextField(_("Notes"), blank=True)

    # --- Lifecycle / flags ---------------------------------------------------
    is_active   = models.BooleanField(_("Active"), default=True)

    created_at = models.DateTimeField(_("Created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated at"), auto_now=True)

    history = HistoricalRecords()
    version = AutoIncVersionField()

    class Meta:
        ordering = ["last_name", "first_name"]
        verbose_name = _("Person")
        verbose_name_plural = _("People")
        indexes = [
            models.Index(fields=["last_name", "first_name"]),
        ]

    def __str__(self):
        return f"{self.last_name}, {self.first_name}"

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
