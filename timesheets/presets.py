# timesheets/presets.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import time

from django.db import transaction
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from . import conf
from .domain import shift_minutes
from .exceptions import ValidationError
from .validation import MIN_SHIFT_MINUTES, MAX_SHIFT_MINUTES

logger = logging.getLogger("timesheets")


@dataclass(frozen=True)
class FallbackPreset:
    """Used when nobody configured a default: settings TIMESHEETS["DEFAULT_WORKING_HOURS"]."""
    name: str
    start_time: time
    end_time: time
    is_default: bool = True
    pk: None = None


def fallback_preset() -> FallbackPreset:
    start, end = conf.default_working_hours()
    return FallbackPreset(name="Default Hours", start_time=start, end_time=end)


def presets_for(person):
    """Global presets plus the person's own, default first."""
    from .models import WorkingHoursPreset
    owner_q = Q(owner__isnull=True)
    if person is not None:
        owner_q |= Q(owner=person)
    return WorkingHoursPreset.objects.filter(owner_q).order_by("-is_default", "owner_id", "start_time", "id")


def default_preset(person=None):
    """Person's default, else the global default, else the configured fallback."""
    from .models import WorkingHoursPreset
    if person is not None:
        own = WorkingHoursPreset.objects.filter(owner=person, is_default=True).first()
        if own:
            return own
    glob = WorkingHoursPreset.objects.filter(owner__isnull=True, is_default=True).first()
    return glob or fallback_preset()


def _check_hours(start: time, end: time) -> None:
    minutes = shift_minutes(start, end)
    if not (MIN_SHIFT_MINUTES <= minutes <= MAX_SHIFT_MINUTES):
        raise ValidationError({"end_time": [str(_("Working hours must be between 30 minutes and 16 hours."))]})


def add_preset(person, start_time: time, end_time: time, *, name: str = "", is_default: bool = False):
    from .models import WorkingHoursPreset
    _check_hours(start_time, end_time)
    with transaction.atomic():
        if is_default:
            WorkingHoursPreset.objects.filter(owner=person, is_default=True).update(is_default=False)
        preset = WorkingHoursPreset.objects.create(
            owner=person,
            name=name or "Custom Hours",
            start_time=start_time,
            end_time=end_time,
            is_default=is_default,
        )
    who = f"person #{person.pk}" if person is not None else "everyone"
    logger.info(f"Working hours preset {preset} added for {who}")
    return preset


def remove_preset(preset, *, person=None) -> None:
    """Delete a preset; with `person` given, only that person's own presets may go."""
    if person is not None and preset.owner_id != person.pk:
        raise ValidationError({"preset": [str(_("You can only remove your own presets."))]})
    logger.info(f"Working hours preset {preset} removed")
    preset.delete()


def set_default(preset):
    from .models import WorkingHoursPreset
    with transaction.atomic():
        WorkingHoursPreset.objects.filter(owner_id=preset.owner_id, is_default=True).exclude(pk=preset.pk).update(is_default=False)
        preset.is_default = True
        preset.save(update_fields=["is_default", "updated_at"])
    return preset
