# File: standins/admin.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _
from django_object_actions import DjangoObjectActions
from simple_history.admin import SimpleHistoryAdmin
from concurrency.admin import ConcurrentModelAdmin

from core.admin_mixins import log_deletions, safe_admin_action
from .models import DelegationStatus, StandinDelegation
from .services import cancel_delegation


@log_deletions
@admin.register(StandinDelegation)
class StandinDelegationAdmin(DjangoObjectActions, SimpleHistoryAdmin, ConcurrentModelAdmin):
    list_display = ("supervisor", "standin", "start_date", "end_date", "status", "expired")
    list_filter = ("status",)
    search_fields = ("supervisor__last_name", "standin__last_name", "reason")
    autocomplete_fields = ("supervisor", "standin")
    readonly_fields = ("created_at", "updated_at")
    date_hierarchy = "start_date"

    fieldsets = (
        (_("Delegation"), {"fields": ("supervisor", "standin", "start_date", "end_date", "status")}),
        (_("Reason"), {"fields": ("reason",)}),
        (_("System"), {"fields": ("version", "created_at", "updated_at")}),
    )

    @admin.display(boolean=True, description=_("Expired"))
    def expired(self, obj):
        return obj.is_expired

    change_actions = ("cancel_standin",)

    def get_change_actions(self, request, object_id, form_url):
        actions = list(super().get_change_actions(request, object_id, form_url))
        obj = self.get_object(request, object_id)
        if obj and obj.status == DelegationStatus.CANCELLED and "cancel_standin" in actions:
            actions.remove("cancel_standin")
        return actions

    @safe_admin_action
    def cancel_standin(self, request, obj):
        cancel_delegation(obj)
        messages.success(request, _("Delegation cancelled."))
    cancel_standin.label = _("Cancel delegation")
    cancel_standin.attrs = {
        "class": "btn btn-block btn-danger",
        "style": "margin-bottom: 1rem;",
    }
