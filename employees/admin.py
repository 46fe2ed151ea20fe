# File: employees/admin.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from simple_history.admin import SimpleHistoryAdmin
from concurrency.admin import ConcurrentModelAdmin

from core.admin_mixins import log_deletions
from .models import Employee, HolidayCalendar


@log_deletions
@admin.register(Employee)
class EmployeeAdmin(SimpleHistoryAdmin, ConcurrentModelAdmin):
    list_display = ("person", "supervisor", "staff_no", "is_active", "updated_at")
    list_filter = ("is_active",)
    search_fields = ("person__last_name", "person__first_name", "staff_no")
    autocomplete_fields = ("person", "supervisor")
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (_("Employment"), {"fields": ("person", "supervisor", "staff_no", "is_active")}),
        (_("Notes"), {"fields": ("notes",)}),
        (_("System"), {"fields": ("version", "created_at", "updated_at")}),
    )


@admin.register(HolidayCalendar)
class HolidayCalendarAdmin(SimpleHistoryAdmin):
    list_display = ("name", "is_active", "updated_at")
    list_filter = ("is_active",)
    search_fields = ("name",)
    readonly_fields = ("created_at", "updated_at", "preview")

    @admin.display(description=_("This year"))
    def preview(self, obj):
        from django.utils import timezone
        from django.utils.html import format_html_join
        if not obj or not obj.pk:
            return "—"
        rows = sorted(obj.holidays_for_year_labeled(timezone.localdate().year).items())
        return format_html_join("", "<div>{} — {}</div>", ((d.isoformat(), label) for d, label in rows))
