# people/admin.py
from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from simple_history.admin import SimpleHistoryAdmin
from concurrency.admin import ConcurrentModelAdmin

from core.admin_mixins import log_deletions
from .models import Person


@log_deletions
@admin.register(Person)
class PersonAdmin(SimpleHistoryAdmin, ConcurrentModelAdmin):
    list_display = ("last_name", "first_name", "email", "user", "is_active")
    list_filter = ("is_active",)
    search_fields = ("last_name", "first_name", "email", "user__username")
    autocomplete_fields = ("user",)
    readonly_fields = ("uuid", "created_at", "updated_at")

    fieldsets = (
        (_("Identity"), {"fields": ("first_name", "last_name", "email", "user")}),
        (_("Status"), {"fields": ("is_active", "notes")}),
        (_("System"), {"fields": ("uuid", "version", "created_at", "updated_at")}),
    )
