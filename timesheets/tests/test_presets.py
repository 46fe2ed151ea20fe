"""
Tests for working-hours presets and the bootstrap_presets command.
"""
from datetime import time
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings

from people.models import Person
from timesheets.exceptions import ValidationError
from timesheets.models import WorkingHoursPreset
from timesheets.presets import (
    FallbackPreset, add_preset, default_preset, presets_for, remove_preset, set_default,
)


class PresetServiceTest(TestCase):

    def setUp(self):
        self.alice = Person.objects.create(first_name="Alice", last_name="Night")
        self.bob = Person.objects.create(first_name="Bob", last_name="Day")

    def test_fallback_when_nothing_configured(self):
        preset = default_preset(self.alice)
        self.assertIsInstance(preset, FallbackPreset)
        self.assertEqual((preset.start_time, preset.end_time), (time(9), time(18)))

    @override_settings(TIMESHEETS={"DEFAULT_WORKING_HOURS": ("08:30", "17:30")})
    def test_fallback_is_configurable(self):
        self.assertEqual(default_preset().start_time, time(8, 30))

    def test_own_default_beats_global(self):
        add_preset(None, time(9), time(18), name="Office", is_default=True)
        self.assertEqual(default_preset(self.alice).name, "Office")
        add_preset(self.alice, time(22), time(6), name="Nights", is_default=True)
        self.assertEqual(default_preset(self.alice).name, "Nights")
        self.assertEqual(default_preset(self.bob).name, "Office")

    def test_new_default_replaces_old_one(self):
        first = add_preset(self.alice, time(8), time(17), is_default=True)
        add_preset(self.alice, time(10), time(19), is_default=True)
        first.refresh_from_db()
        self.assertFalse(first.is_default)
        self.assertEqual(WorkingHoursPreset.objects.filter(owner=self.alice, is_default=True).count(), 1)

    def test_set_default(self):
        a = add_preset(self.alice, time(8), time(17), is_default=True)
        b = add_preset(self.alice, time(10), time(19))
        set_default(b)
        a.refresh_from_db()
        self.assertFalse(a.is_default)
        self.assertEqual(default_preset(self.alice), b)

    def test_hours_bounds(self):
        with self.assertRaises(ValidationError):
            add_preset(self.alice, time(9), time(9, 10))
        with self.assertRaises(ValidationError):
            add_preset(self.alice, time(6), time(23))
        self.assertEqual(add_preset(self.alice, time(22), time(6)).name, "Custom Hours")

    def test_listing_and_removal_are_per_person(self):
        add_preset(None, time(9), time(18), name="Office")
        mine = add_preset(self.alice, time(7), time(16), name="Early")
        add_preset(self.bob, time(12), time(21), name="Late")
        self.assertEqual({p.name for p in presets_for(self.alice)}, {"Office", "Early"})

        with self.assertRaises(ValidationError):
            remove_preset(mine, person=self.bob)
        remove_preset(mine, person=self.alice)
        self.assertFalse(WorkingHoursPreset.objects.filter(pk=mine.pk).exists())


class BootstrapPresetsCommandTest(TestCase):

    def run_command(self, *args):
        out = StringIO()
        call_command("bootstrap_presets", *args, stdout=out)
        return out.getvalue()

    def test_loads_fixture_and_is_idempotent(self):
        out = self.run_command()
        self.assertIn("3 created", out)
        self.assertEqual(
            set(WorkingHoursPreset.objects.values_list("name", flat=True)),
            {"Default Hours", "Early Shift", "Night Shift"},
        )
        self.assertEqual(WorkingHoursPreset.objects.get(is_default=True).name, "Default Hours")

        out = self.run_command()
        self.assertIn("0 created, 0 updated, 3 unchanged", out)

    def test_dry_run_writes_nothing(self):
        out = self.run_command("--dry-run")
        self.assertIn("[DRY] Create Early Shift", out)
        self.assertFalse(WorkingHoursPreset.objects.exists())

    def test_extra_preset_from_cli(self):
        self.run_command("--preset", "Late Shift=13:00-22:00")
        late = WorkingHoursPreset.objects.get(name="Late Shift")
        self.assertEqual((late.start_time, late.end_time), (time(13), time(22)))
        self.assertFalse(late.is_default)

    def test_bad_cli_preset(self):
        with self.assertRaises(CommandError):
            self.run_command("--preset", "Late Shift 13:00")
        with self.assertRaises(CommandError):
            self.run_command("--preset", "Late Shift=1pm-22:00")

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            self.run_command("--file", "/nonexistent/presets.yaml")
