# File: core/admin_mixins.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

import logging
from functools import wraps

from django.contrib import messages
from django.core.exceptions import PermissionDenied
from django.http import HttpResponseRedirect
from django.urls import reverse

from timesheets.exceptions import TimesheetError

admin_logger = logging.getLogger('timeflow.admin')


def _change_page(admin, obj):
    opts = admin.model._meta
    return HttpResponseRedirect(
        reverse(f'admin:{opts.app_label}_{opts.model_name}_change', args=[obj.pk])
    )


def safe_admin_action(func):
    """
    Consistent error handling for admin object actions.

    - PermissionDenied and engine errors (TimesheetError) become an error message
    - anything else is logged with traceback and shown as a generic error
    - an action returning None redirects back to the change page
    """
    @wraps(func)
    def wrapper(self, request, obj):
        try:
            result = func(self, request, obj)
            if result is None:
                return _change_page(self, obj)
            return result
        except (PermissionDenied, TimesheetError) as e:
            self.message_user(request, str(e), level=messages.ERROR)
            return _change_page(self, obj)
        except Exception as e:
            self.message_user(request, f"An error occurred: {e}", level=messages.ERROR)
            admin_logger.exception(
                f"Error in {self.__class__.__name__}.{func.__name__} "
                f"for object {obj.pk}: {e}"
            )
            return _change_page(self, obj)
    return wrapper


def log_deletions(admin_class):
    """Log single and bulk deletes of any ModelAdmin."""

    original_delete_model = admin_class.delete_model
    original_delete_queryset = admin_class.delete_queryset

    @wraps(original_delete_model)
    def delete_model_with_logging(self, request, obj):
        admin_logger.warning(
            f"User '{request.user.username}' deleted {obj._meta.verbose_name} "
            f"#{obj.pk}: {str(obj)[:100]}"
        )
        return original_delete_model(self, request, obj)

    @wraps(original_delete_queryset)
    def delete_queryset_with_logging(self, request, queryset):
        model_name = queryset.model._meta.verbose_name_plural
        count = queryset.count()
        admin_logger.warning(
            f"User '{request.user.username}' bulk deleted {count} {model_name}"
        )
        return original_delete_queryset(self, request, queryset)

    admin_class.delete_model = delete_model_with_logging
    admin_class.delete_queryset = delete_queryset_with_logging

    return admin_class
