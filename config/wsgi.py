# File: config/wsgi.py
# Version: 1.0.0
# Author: vas
# Modified: 2026-10-19

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_wsgi_application()
