# File: timesheets/admin.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from django.contrib import admin, messages
from django.db.models import Q
from django.shortcuts import render
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from django_object_actions import DjangoObjectActions
from simple_history.admin import SimpleHistoryAdmin
from concurrency.admin import ConcurrentModelAdmin

from core.admin_mixins import log_deletions, safe_admin_action
from core.utils.authz import is_timesheets_manager
from standins.models import StandinDelegation
from standins.substitution import DjangoDelegationDirectory

from .choices import Decision, TimesheetStatus
from .identity import actor_for_user
from .models import (
    AdminEditRecord, ApprovalRecord, MonthlyTimesheet, TimesheetEntry, WorkingHoursPreset,
)
from .repository import DjangoTimesheetRepository
from .workflow import ApprovalWorkflow


def _workflow() -> ApprovalWorkflow:
    return ApprovalWorkflow(DjangoTimesheetRepository(), DjangoDelegationDirectory())


# ------------------------------
# Inlines (read-only; entries change through the engine)
# ------------------------------

class TimesheetEntryInline(admin.TabularInline):
    model = TimesheetEntry
    extra = 0
    can_delete = False
    fields = (
        "date", "entry_type", "start_time", "end_time", "half_day_period",
        "date_earned", "document_reference", "is_primary_document", "notes",
    )
    readonly_fields = fields
    show_change_link = False

    def has_add_permission(self, request, obj=None):
        return False


class ApprovalRecordInline(admin.TabularInline):
    model = ApprovalRecord
    extra = 0
    can_delete = False
    fields = ("timestamp", "action", "acting_identity", "acting_on_behalf_of", "version", "comments")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class AdminEditRecordInline(admin.TabularInline):
    model = AdminEditRecord
    extra = 0
    can_delete = False
    fields = ("edited_at", "edited_by", "edit_reason", "saved_dates", "deleted_dates")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


# ------------------------------
# Timesheets
# ------------------------------

@log_deletions
@admin.register(MonthlyTimesheet)
class MonthlyTimesheetAdmin(DjangoObjectActions, SimpleHistoryAdmin, ConcurrentModelAdmin):
    list_display = ("employee", "period", "status", "version", "submitted_at", "approved_by_name", "approved_at")
    list_filter = ("status", "year", "month")
    search_fields = ("employee__person__last_name", "employee__person__first_name", "employee__staff_no")
    date_hierarchy = "submitted_at"
    inlines = [TimesheetEntryInline, ApprovalRecordInline, AdminEditRecordInline]

    readonly_fields = (
        "employee", "year", "month", "status", "version", "submitted_at",
        "approved_by", "approved_by_name", "approved_on_behalf_of", "approved_at", "approval_comments",
        "edited_by", "edited_at", "edit_reason", "created_at", "updated_at",
    )
    fieldsets = (
        (_("Period"), {"fields": ("employee", "year", "month")}),
        (_("Workflow"), {"fields": ("status", "version", "submitted_at")}),
        (_("Decision"), {"fields": ("approved_by", "approved_by_name", "approved_on_behalf_of", "approved_at", "approval_comments")}),
        (_("Admin edit"), {"fields": ("edited_by", "edited_at", "edit_reason")}),
        (_("System"), {"fields": ("lock_version", "created_at", "updated_at")}),
    )

    @admin.display(description=_("Period"), ordering="year")
    def period(self, obj):
        return f"{obj.year}-{obj.month:02d}"

    def has_add_permission(self, request):
        # sheets appear on the first entry write
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request).select_related("employee__person")
        user = request.user
        if user.is_superuser or is_timesheets_manager(user):
            return qs
        person = getattr(user, "person", None)
        if person is None:
            return qs.none()
        today = timezone.localdate()
        delegated = StandinDelegation.objects.active_on(today).filter(standin=person).values("supervisor_id")
        return qs.filter(
            Q(employee__person=person)
            | Q(employee__supervisor=person)
            | Q(employee__supervisor_id__in=delegated)
        )

    change_actions = ("approve_timesheet", "reject_timesheet")

    def get_change_actions(self, request, object_id, form_url):
        actions = list(super().get_change_actions(request, object_id, form_url))
        obj = self.get_object(request, object_id)
        if obj and obj.status != TimesheetStatus.SUBMITTED:
            actions = [a for a in actions if a not in ("approve_timesheet", "reject_timesheet")]
        return actions

    @safe_admin_action
    def approve_timesheet(self, request, obj):
        actor = actor_for_user(request.user)
        saved = _workflow().decide(obj.to_domain(), Decision.APPROVED, "", actor)
        messages.success(request, _("Approved (version %(v)s).") % {"v": saved.version})
    approve_timesheet.label = _("Approve")
    approve_timesheet.attrs = {
        "class": "btn btn-block btn-success",
        "style": "margin-bottom: 1rem;",
    }

    @safe_admin_action
    def reject_timesheet(self, request, obj):
        if "comments" not in request.POST:
            context = {
                **self.admin_site.each_context(request),
                "title": _("Reject timesheet"),
                "opts": self.model._meta,
                "original": obj,
            }
            return render(request, "admin/timesheets/monthlytimesheet/reject_timesheet.html", context)
        actor = actor_for_user(request.user)
        comments = request.POST.get("comments", "").strip()
        saved = _workflow().decide(obj.to_domain(), Decision.REJECTED, comments, actor)
        messages.warning(request, _("Rejected (version %(v)s).") % {"v": saved.version})
    reject_timesheet.label = _("Reject")
    reject_timesheet.attrs = {
        "class": "btn btn-block btn-danger",
        "style": "margin-bottom: 1rem;",
    }


@admin.register(ApprovalRecord)
class ApprovalRecordAdmin(admin.ModelAdmin):
    list_display = ("timesheet", "action", "acting_identity", "acting_on_behalf_of", "version", "timestamp")
    list_filter = ("action",)
    search_fields = ("timesheet__employee__person__last_name", "acting_identity__last_name")
    readonly_fields = ("timesheet", "action", "acting_identity", "acting_on_behalf_of", "comments", "version", "timestamp")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AdminEditRecord)
class AdminEditRecordAdmin(admin.ModelAdmin):
    list_display = ("timesheet", "edited_by", "edited_at")
    search_fields = ("timesheet__employee__person__last_name", "edit_reason")
    readonly_fields = ("timesheet", "edited_by", "edited_at", "edit_reason", "saved_dates", "deleted_dates")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@log_deletions
@admin.register(WorkingHoursPreset)
class WorkingHoursPresetAdmin(SimpleHistoryAdmin):
    list_display = ("name", "owner", "start_time", "end_time", "is_default")
    list_filter = ("is_default",)
    search_fields = ("name", "owner__last_name")
    autocomplete_fields = ("owner",)
