"""
Create/refresh global working-hours presets (idempotent).

Usage:
  python manage.py bootstrap_presets
  python manage.py bootstrap_presets --dry-run
  python manage.py bootstrap_presets --file /custom/presets.yaml
  python manage.py bootstrap_presets --preset "Late Shift=13:00-22:00"
"""
# File: timesheets/management/commands/bootstrap_presets.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from datetime import time
from pathlib import Path

import yaml
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from timesheets.models import WorkingHoursPreset
from timesheets.presets import fallback_preset


def default_fixture() -> Path:
    return Path(__file__).resolve().parent.parent.parent / "fixtures" / "presets.yaml"


def parse_time(value, where: str) -> time:
    try:
        return time.fromisoformat(str(value))
    except ValueError:
        raise CommandError(f"Invalid time '{value}' in {where}; use HH:MM.")


def parse_cli_preset(raw: str) -> dict:
    """'Late Shift=13:00-22:00' → {name, start, end}"""
    try:
        name, span = raw.split("=", 1)
        start, end = span.split("-", 1)
    except ValueError:
        raise CommandError(f"Invalid --preset '{raw}'. Use NAME=HH:MM-HH:MM.")
    return {"name": name.strip(), "start": start.strip(), "end": end.strip()}


class Command(BaseCommand):
    help = "Create/refresh global working-hours presets from YAML (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--file", "-f", default=None, help="Path to YAML file (default: timesheets/fixtures/presets.yaml)")
        parser.add_argument("--preset", action="append", default=[], help="Extra preset NAME=HH:MM-HH:MM (repeatable)")
        parser.add_argument("--dry-run", action="store_true")

    def handle(self, *args, **opts):
        file_path = Path(opts["file"]) if opts["file"] else default_fixture()
        dry = opts["dry_run"]

        if file_path.exists():
            data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
            rows = list(data.get("presets") or [])
        elif opts["file"]:
            raise CommandError(f"YAML file not found: {file_path}")
        else:
            rows = []

        rows += [parse_cli_preset(raw) for raw in opts["preset"]]

        if not any(r.get("default") for r in rows):
            fb = fallback_preset()
            rows.insert(0, {
                "name": fb.name, "start": fb.start_time.strftime("%H:%M"),
                "end": fb.end_time.strftime("%H:%M"), "default": True,
            })
        if sum(1 for r in rows if r.get("default")) > 1:
            raise CommandError("Only one global preset can be the default.")

        created = updated = unchanged = 0
        with transaction.atomic():
            for row in rows:
                name = (row.get("name") or "").strip()
                if not name:
                    raise CommandError(f"Missing 'name' in: {row}")
                start = parse_time(row.get("start"), name)
                end = parse_time(row.get("end"), name)
                is_default = bool(row.get("default"))

                existing = WorkingHoursPreset.objects.filter(owner__isnull=True, name=name).first()
                if existing is None:
                    if dry:
                        self.stdout.write(self.style.NOTICE(f"[DRY] Create {name} {start:%H:%M}-{end:%H:%M}"))
                    else:
                        if is_default:
                            WorkingHoursPreset.objects.filter(owner__isnull=True, is_default=True).update(is_default=False)
                        WorkingHoursPreset.objects.create(
                            owner=None, name=name, start_time=start, end_time=end, is_default=is_default,
                        )
                    created += 1
                    continue

                changed = (existing.start_time, existing.end_time, existing.is_default) != (start, end, is_default)
                if not changed:
                    unchanged += 1
                    continue
                if dry:
                    self.stdout.write(self.style.NOTICE(f"[DRY] Update {name} → {start:%H:%M}-{end:%H:%M}"))
                else:
                    if is_default:
                        WorkingHoursPreset.objects.filter(owner__isnull=True, is_default=True).exclude(pk=existing.pk).update(is_default=False)
                    existing.start_time, existing.end_time, existing.is_default = start, end, is_default
                    existing.save()
                updated += 1

            if dry:
                transaction.set_rollback(True)

        summary = f"{created} created, {updated} updated, {unchanged} unchanged"
        if dry:
            self.stdout.write(self.style.WARNING(f"Dry run complete ({summary}). No changes applied."))
        else:
            self.stdout.write(self.style.SUCCESS(f"Presets bootstrapped: {summary}."))
