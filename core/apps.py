# File: core/apps.py
# Version: 1.1.0
# Author: vas
# Modified: 2026-10-19

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = _("Timeflow core")

    def ready(self):
        # login/logout/failed-login logging
        from . import signals  # noqa: F401
