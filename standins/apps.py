# File: standins/apps.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class StandinsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'standins'
    verbose_name = _('Stand-ins')
